"""Provider services used by the operator."""
