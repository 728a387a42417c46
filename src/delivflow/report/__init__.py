from .plan_md import REQUIRED_SECTIONS, generate_plan_md

__all__ = ["REQUIRED_SECTIONS", "generate_plan_md"]
