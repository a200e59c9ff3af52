"""
LifeOS reminders: task reminder scheduling and browser push delivery.
"""
