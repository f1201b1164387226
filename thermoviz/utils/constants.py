"""Physical constants used throughout thermoviz.

Engine quantities use fixed units: K, kPa, m³/kg, kJ/kg and kJ/(kg·K).
"""

# Universal constants
R_UNIVERSAL = 8.31446261815324  # J/(mol·K)

# Reference (dead) state for entropy, exergy and free energies
T_REF = 298.15  # K
P_REF = 101.325  # kPa

# Thermodynamic
T_CELSIUS_OFFSET = 273.15  # K
T_CRITICAL_WATER = 647.096  # K
P_TRIPLE_WATER = 0.611657  # kPa, no liquid water below this pressure

# Antoine equation for water, 99–374 °C: log10(P[mmHg]) = A − B / (C + T[°C])
ANTOINE_A = 8.14019
ANTOINE_B = 1810.94
ANTOINE_C = 244.485

# Trouton's rule: molar entropy of vaporisation ≈ 10.5·R at the normal boiling point
TROUTON_FACTOR = 10.5

# Conversion factors
KPA_TO_MMHG = 7.50061683
MMHG_TO_KPA = 1.0 / KPA_TO_MMHG
J_TO_KJ = 1.0e-3
