from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from hemodynamics.calculators import LVGeometry, Sex
from hemodynamics.diastolic import DiastolicResult


class ValveGrade(str, Enum):
    NONE = "no"
    MILD = "leve"
    MODERATE = "moderada"
    SEVERE = "severa"


class ChamberState(str, Enum):
    NORMAL = "normal"
    DILATED = "dilatado"


class DilationBand(str, Enum):
    MILD = "leve"
    MODERATE = "moderada"
    SEVERE = "severa"


class ConclusionInputs(BaseModel):
    """Everything the conclusions list is built from, already classified.

    Valve morphologies are free text as entered by the operator
    (e.g. "Válvula mitral con Prolapso de valva posterior").
    """

    # Rhythm
    rhythm: str = "Ritmo sinusal"
    conduction: Optional[str] = None        # None / "normal" -> not mentioned

    # Left ventricle
    geometry: Optional[LVGeometry] = None
    lv_dilated: bool = False
    ejection_fraction: Optional[float] = Field(default=None, ge=0, le=100)
    diastolic: Optional[DiastolicResult] = None

    # Left atrium
    la_volume_index: Optional[float] = Field(default=None, ge=0)

    # Mitral valve
    mitral_morphology: str = ""
    mitral_regurgitation: ValveGrade = ValveGrade.NONE
    mitral_stenosis: ValveGrade = ValveGrade.NONE

    # Aortic valve
    aortic_morphology: str = ""
    aortic_stenosis: ValveGrade = ValveGrade.NONE
    aortic_regurgitation: ValveGrade = ValveGrade.NONE
    aortic_regurgitation_advanced: str = ""  # e.g. "Insuficiencia Aórtica Severa."

    # Aorta
    bsa: Optional[float] = Field(default=None, gt=0)
    sex: Sex = Sex.MALE
    aortic_root_mm: Optional[float] = Field(default=None, ge=0)
    ascending_aorta_mm: Optional[float] = Field(default=None, ge=0)

    # Right heart
    ra_state: ChamberState = ChamberState.NORMAL
    rv_state: ChamberState = ChamberState.NORMAL
    ra_area_cm2: Optional[float] = Field(default=None, ge=0)
    rv_basal_mm: Optional[float] = Field(default=None, ge=0)
    psap: Optional[float] = Field(default=None, ge=0)
    tapse_mm: Optional[float] = Field(default=None, ge=0)
