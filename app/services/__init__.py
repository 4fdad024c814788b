"""
Services layer - Business logic goes here.
Keep services focused on specific domains (reports, media, users).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services raise app.core.exceptions errors; routes do not catch them
- Each service has a get_*() singleton accessor; tests build their own instances
"""
