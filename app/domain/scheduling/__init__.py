"""
Scheduling Domain

Recurring job series, the operations calendar, calendar bulk edits and
shift swap resolution.
"""
