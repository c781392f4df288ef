"""
LiVE relay protocol logic.

Includes:
- topics: Topic addressing and inbound topic classification.
- attendance: Attendance envelopes and the heartbeat timer.
- preauth: One-shot connectivity probe.
- event_stream: Session manager owning the broker connection.
"""
