"""SlotForge: validation of component slot attribute definitions."""
