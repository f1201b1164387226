"""Core data and property modules for thermoviz.

This package contains the building blocks shared by every cycle:
- errors: Exception hierarchy of the engine
- fluids: Ideal-gas fluid table and CoolProp-derived fluids
- states: State points, free energies, exergy and water saturation
- config: Engine settings and result export (JSON)
- presets: Named cycle configurations
"""
