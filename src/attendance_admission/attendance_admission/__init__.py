"""Attendance admission package.

Server side: Flask controllers over service/repository layers deciding
whether a check-in / check-out is authentic and policy-compliant.
Client side (`client/`): offline queue, permission arbiter and facade used
by capture devices.
"""
