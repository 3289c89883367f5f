"""Reminder service module (scan engines, Celery worker, diagnostic API).

Runs next to the Task Master web app. The scan engines read tasks and
planner events from Firestore, send reminder emails through SendGrid, drop
an in-app notification for the owner and flag the document so it is never
reminded twice.
"""
