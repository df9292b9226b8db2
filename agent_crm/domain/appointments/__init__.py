"""
Appointments Domain

Agent appointments: CRUD with soft delete, conflict detection before every
write that moves an appointment's window, week and calendar views, search,
statistics and client autocomplete.

KNOWN GAP: the conflict check and the following write are not atomic. Two
concurrent bookings of the same slot can both succeed; nothing at the storage
level forbids overlapping rows.
"""
