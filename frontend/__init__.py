"""
Frontend Layer

Filter state, interaction intents and view models consumed by the
(external) renderer. Reads backend contracts; never calls the store or
the model.
"""
