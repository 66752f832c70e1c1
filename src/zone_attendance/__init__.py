"""Zone attendance package.

Tracks per-participant presence in conference zones and accrues recognized
minutes net of scheduled breaks. Organized by feature modules (rules,
attendance, kiosk, audit, ...) with a thin Flask controller layer over
service/repository layers.
"""
