"""
Settings Schemas for the Phone Order Service
============================================

Models for reading and updating phone order settings through the admin API.
Every field of ``SettingsUpdate`` is optional; only the fields sent are
written.
"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ..services.settings import DISPLAY_POSITIONS, OUT_OF_STOCK_BEHAVIORS


class SettingsOut(BaseModel):
    enabled: bool
    display_position: str
    form_title: str
    form_subtitle: str
    form_description: str
    form_button_text: str
    out_of_stock_behavior: str
    enable_analytics: bool
    enable_abilities_api: bool


class SettingsUpdate(BaseModel):
    enabled: Optional[bool] = None
    display_position: Optional[str] = None
    form_title: Optional[str] = None
    form_subtitle: Optional[str] = None
    form_description: Optional[str] = None
    form_button_text: Optional[str] = None
    out_of_stock_behavior: Optional[str] = None
    enable_analytics: Optional[bool] = None
    enable_abilities_api: Optional[bool] = None

    @field_validator("display_position")
    @classmethod
    def check_display_position(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in DISPLAY_POSITIONS:
            raise ValueError(f"display_position must be one of: {', '.join(DISPLAY_POSITIONS)}")
        return v

    @field_validator("out_of_stock_behavior")
    @classmethod
    def check_out_of_stock_behavior(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in OUT_OF_STOCK_BEHAVIORS:
            raise ValueError(
                f"out_of_stock_behavior must be one of: {', '.join(OUT_OF_STOCK_BEHAVIORS)}"
            )
        return v
