"""
Drafts module.

Keyed persistence of in-progress report documents with an optimistic
local mirror, project-cascading deletes and grouping for the resume picker.
"""
