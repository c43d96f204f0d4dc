"""
Services layer - Business logic goes here.
Keep services focused on one pipeline stage each.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Intake stages (validate, geocode, classify, publish) never touch the store
- The consumer is the only writer to the store
- Read paths always go through role projection
"""
