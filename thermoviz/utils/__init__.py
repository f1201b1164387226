"""Utility modules for thermoviz."""

from thermoviz.utils.constants import P_REF, R_UNIVERSAL, T_REF

__all__ = ["P_REF", "R_UNIVERSAL", "T_REF"]
