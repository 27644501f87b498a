"""
projops_kernel -- persistence, logging, errors and time for the
project-operations engines.

Layers:
    domain/    clock and actor identity (pure)
    db/        SQLAlchemy base, engine/session management, immutability
    models/    ORM models: projects, milestones, delay logs, vendors, POs
    services/  sequence counters
"""
