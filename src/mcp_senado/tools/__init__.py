"""
Senate tools grouped by category.

Modules:
    base: Tool result, context and definition types
    common: Envelope unwrapping, pagination and the endpoint tool factory
    senators, proposals, votings, committees, parties, reference, sessions:
        Tool definitions for each category
    catalog: The full tool list and registration helper
"""
