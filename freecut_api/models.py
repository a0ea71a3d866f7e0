from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from freecut.core.optimizer_core import (
    CutPiece, GrooveDirection, GrooveLength, OptimizationParams, Pattern, RotationMode, Side, StockPiece,
    cut_from_dict, stock_from_dict
)

from .config import DEFAULT_KERF, DEFAULT_GRID_STEP


class EdgeBandSides(BaseModel):
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False


class EdgeBandModel(BaseModel):
    name: str = ""
    thickness: float = Field(default=0.0, ge=0)
    sides: EdgeBandSides = Field(default_factory=EdgeBandSides)


class GrooveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    width: float = Field(default=0.0, ge=0)
    direction: GrooveDirection = GrooveDirection.HORIZONTAL
    length: GrooveLength = GrooveLength.FULL
    length_value: Optional[float] = Field(default=None, ge=0, alias="lengthValue")
    offset_side: Optional[Side] = Field(default=None, alias="offsetSide")
    offset: float = Field(default=0.0, ge=0)


class StockModel(BaseModel):
    """Модель листа на складе"""
    id: Optional[str] = None
    name: str = ""
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    quantity: int = Field(default=1, ge=0)
    pattern: Pattern = Pattern.NONE


class CutModel(BaseModel):
    """Модель детали"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str = ""
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    quantity: int = Field(default=1, ge=0)
    pattern: Pattern = Pattern.NONE
    edge_band: Optional[EdgeBandModel] = Field(default=None, alias="edgeBand")
    groove: Optional[GrooveModel] = None


class OptimizeRequest(BaseModel):
    """Модель запроса оптимизации и экспорта"""
    stock: List[StockModel]
    cuts: List[CutModel]
    kerf: float = Field(default=DEFAULT_KERF, ge=0)
    grid_step: float = Field(default=DEFAULT_GRID_STEP, gt=0)
    allow_rotation: bool = True

    def to_job(self) -> Tuple[List[StockPiece], List[CutPiece], OptimizationParams]:
        """Листы, детали и параметры в типах ядра оптимизации"""
        stock = [stock_from_dict(item.model_dump(mode='json'), i) for i, item in enumerate(self.stock)]
        cuts = [cut_from_dict(item.model_dump(mode='json', by_alias=True), i) for i, item in enumerate(self.cuts)]
        params = OptimizationParams(
            kerf=self.kerf,
            grid_step=self.grid_step,
            rotation_mode=RotationMode.ALLOW_90 if self.allow_rotation else RotationMode.NONE,
        )
        return stock, cuts, params
