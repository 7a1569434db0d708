"""Data Transfer Objects for the costing engine and the catalog repository.

The costing engine works on plain immutable values rather than ORM rows so
that it can be called with data from any source (the SQL repository, the
in-memory repository, a JSON file, a spreadsheet row collector) and so a
calculation can never write back through a live session.

Repositories hand out these objects as copies; mutating a returned value is
impossible (frozen dataclasses), so callers cannot alias repository storage.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from src.utils.validators import to_decimal


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_decimal(value)


@dataclass(frozen=True)
class MasterIngredientData:
    """One row of the master ingredient price list.

    Attributes:
        name: Unique, case-sensitive match key used by recipe lines
        price_per_kg: Price of one kilogram (or litre) of the ingredient
        brand: Optional brand label
        id: Storage identifier, None for values not loaded from a repository
    """

    name: str
    price_per_kg: Decimal
    brand: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "price_per_kg", to_decimal(self.price_per_kg))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MasterIngredientData":
        return cls(
            name=data["name"],
            price_per_kg=data["price_per_kg"],
            brand=data.get("brand") or None,
            id=data.get("id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price_per_kg": self.price_per_kg,
            "brand": self.brand,
        }


@dataclass(frozen=True)
class RecipeIngredientLine:
    """A quantity of one master ingredient used by a recipe.

    The unit is kept exactly as entered; conversion to kilograms happens
    only inside cost calculations.
    """

    ingredient_name: str
    quantity: Decimal
    unit: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipeIngredientLine":
        return cls(
            ingredient_name=data["ingredient_name"],
            quantity=data["quantity"],
            unit=data["unit"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ingredient_name": self.ingredient_name,
            "quantity": self.quantity,
            "unit": self.unit,
        }

    def scaled(self, multiplier: Decimal) -> "RecipeIngredientLine":
        """Copy of this line with the quantity multiplied, unit unchanged."""
        return replace(self, quantity=self.quantity * multiplier)


def _as_lines(lines: Iterable[Any]) -> Tuple[RecipeIngredientLine, ...]:
    result = []
    for line in lines:
        if isinstance(line, RecipeIngredientLine):
            result.append(line)
        else:
            result.append(RecipeIngredientLine.from_dict(line))
    return tuple(result)


@dataclass(frozen=True)
class RecipeData:
    """A recipe with its ingredient lines.

    Attributes:
        id: Storage identifier (used as the key of desired quantities)
        name: Recipe name (display key for indent columns)
        overheads: Per-batch surcharge added on top of ingredient cost
        selling_price: Stored selling price (policy-derived or manual)
        ingredients: Ingredient lines; order is irrelevant for costing
        is_hidden: Visibility flag; never affects costing
    """

    id: Any
    name: str
    overheads: Decimal = Decimal("0")
    selling_price: Decimal = Decimal("0")
    ingredients: Tuple[RecipeIngredientLine, ...] = field(default_factory=tuple)
    is_hidden: bool = False
    preparation: Optional[str] = None
    shelf_life: Optional[str] = None
    storage: Optional[str] = None
    calories: Optional[Decimal] = None
    protein: Optional[Decimal] = None
    fat: Optional[Decimal] = None
    carbs: Optional[Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "overheads", to_decimal(self.overheads or 0))
        object.__setattr__(self, "selling_price", to_decimal(self.selling_price or 0))
        object.__setattr__(self, "ingredients", _as_lines(self.ingredients))
        object.__setattr__(self, "is_hidden", bool(self.is_hidden))
        for nutrient in ("calories", "protein", "fat", "carbs"):
            object.__setattr__(self, nutrient, _optional_decimal(getattr(self, nutrient)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipeData":
        return cls(
            id=data.get("id", data["name"]),
            name=data["name"],
            overheads=data.get("overheads", 0),
            selling_price=data.get("selling_price", 0),
            ingredients=data.get("ingredients", ()),
            is_hidden=data.get("is_hidden", False),
            preparation=data.get("preparation"),
            shelf_life=data.get("shelf_life"),
            storage=data.get("storage"),
            calories=data.get("calories"),
            protein=data.get("protein"),
            fat=data.get("fat"),
            carbs=data.get("carbs"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "overheads": self.overheads,
            "selling_price": self.selling_price,
            "ingredients": [line.to_dict() for line in self.ingredients],
            "is_hidden": self.is_hidden,
            "preparation": self.preparation,
            "shelf_life": self.shelf_life,
            "storage": self.storage,
            "calories": self.calories,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }
