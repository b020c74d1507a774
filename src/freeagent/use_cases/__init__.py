"""Business rules applied to records before they are sent.

No network calls here: functions accept already-built records.
"""
