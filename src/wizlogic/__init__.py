"""
Wizard Logic Model

A declarative configuration-resolution engine for multi-step setup
wizards.

A static schema describes modes, fields (with dependencies, option
sets and defaults) and steps (conditionally included). A session
keeps a consistent partial state as the user edits fields:

    schema       validated, immutable SchemaStore
    reducer      (state, intent) → state, with cascade resets
    resolvers    active fields, field options, resolved steps
    engine       WizardEngine, one per wizard session

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering (components, sheets, dialogs)
    - Data fetching
    - Persistence of sessions

Every public operation is synchronous and performs no I/O.
"""

__version__ = "0.1.0"
