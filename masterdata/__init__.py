"""
Master data module.

Single shared registry of pick-list values (projects, companies, people,
training topics ...) read by every wizard, with admin-gated project
removal cascading into the drafts store.
"""
