"""
Use Cases

Organized into domain folders:
- sessions/: Session revocation
- jobs/: Background job submission and status
- admin/: Operational statistics
"""
