"""
Scheduling Domain

Contractor availability and the realtor -> contractor meeting workflow.

Structure:
```
domain/scheduling/
├── __init__.py
├── entities.py             # Plain Availability / BookedSlot / MeetingRequest values
├── exceptions.py           # Scheduling rule violations
├── time_calculator.py      # HH:MM parsing, weekday numbering (0=Sunday)
├── availability_service.py # Free slot generation from working hours
├── proposal_service.py     # Realtor proposals and the direct-booking shortcut
├── approval_service.py     # pending -> accepted | declined lifecycle, notes, schedule view
├── repository.py           # SQLAlchemy queries and row <-> value conversion
├── schemas.py              # Request/response models
├── service.py              # Orchestration + HTTP error mapping
└── router.py               # /contractors/{contractor_id}/... endpoints
```

The slot and lifecycle functions never touch the database: the service loads a
ContractorCalendar through the repository, runs the pure operation, and
persists what changed.

LIFECYCLE:
- pending -> accepted: request removed, confirmed BookedSlot inserted (one transaction)
- pending -> declined: request kept for history
- accepted/declined are terminal
- direct booking = proposal immediately accepted

CONFLICTS:
- Two realtors may hold pending requests for the same slot; first acceptance wins
- booked_slots has a unique (contractor_id, date, start_time) constraint
- availabilities.version guards concurrent acceptances for one contractor
"""
