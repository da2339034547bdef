"""Attendance Engine package.

Time-and-attendance computation core organized by feature modules
(schedules, attendance, validation, requests, payroll, ...) with a thin Flask
controller layer over service/repository layers.
"""
