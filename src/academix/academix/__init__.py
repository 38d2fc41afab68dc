"""Academix attendance desk.

This package is organized by feature modules (attendance, students, leads, ...)
with a thin Flask controller layer over service/repository layers. The
attendance grouping and session edit logic lives in ``attendance`` and the
per-user cache reconciliation in ``workspace``.
"""
