"""CampusTrack attendance engine.

Feature modules (periods, attendance, reports, students, mdc, ...) each keep
their domain model, repository protocol, MySQL repository and service layer
side by side. Flask controllers stay thin and only translate results to JSON.
"""
