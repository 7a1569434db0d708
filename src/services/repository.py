"""
Catalog Repository - storage for master ingredients and recipes.

One interface, two interchangeable backends:
- InMemoryCatalogRepository: plain dictionaries, for tests, demos and the
  command-line tool's JSON catalog files
- SqlCatalogRepository: SQLAlchemy, using session_scope() per operation

Callers receive the backend by dependency injection (constructor argument
or get_catalog_repository()) rather than importing a specific module.

Every read returns detached immutable values from src.services.dto, so
callers can never modify stored records by reference.

Validation, the uniqueness rule on ingredient names and the selling price
policy live in the CatalogRepository base class; backends only implement
the storage primitives.
"""

import copy
import itertools
import json
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.models import MasterIngredient, Recipe, RecipeIngredient
from src.services.costing_service import calculate_recipe_cost, resolve_selling_price
from src.services.database import session_scope
from src.services.dto import MasterIngredientData, RecipeData, RecipeIngredientLine
from src.services.exceptions import (
    DatabaseError,
    IngredientNameExists,
    MasterIngredientNotFound,
    RecipeNotFound,
    ValidationError,
)
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.config import get_config
from src.utils.constants import MAX_NAME_LENGTH
from src.utils.validators import (
    to_decimal,
    validate_master_ingredient_data,
    validate_recipe_data,
    validate_required_string,
    validate_string_length,
)

logger = get_service_logger(__name__)

# Marker for "argument not given" where None is a meaningful value
_UNSET = object()


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value

RECIPE_FIELDS = (
    "name",
    "preparation",
    "overheads",
    "shelf_life",
    "storage",
    "calories",
    "protein",
    "fat",
    "carbs",
)


def _clean_recipe_fields(recipe_fields: Dict[str, Any]) -> Dict[str, Any]:
    fields = {key: recipe_fields[key] for key in RECIPE_FIELDS if key in recipe_fields}
    fields["overheads"] = to_decimal(fields.get("overheads") or 0)
    for nutrient in ("calories", "protein", "fat", "carbs"):
        if fields.get(nutrient) in ("", None):
            fields[nutrient] = None
        elif nutrient in fields:
            fields[nutrient] = to_decimal(fields[nutrient])
    return fields


def _clean_lines(lines: List[Any]) -> List[RecipeIngredientLine]:
    result = []
    for line in lines:
        if isinstance(line, RecipeIngredientLine):
            line = line.to_dict()
        result.append(
            RecipeIngredientLine(
                ingredient_name=line["ingredient_name"].strip(),
                quantity=line["quantity"],
                unit=line["unit"].strip(),
            )
        )
    return result


def _line_dicts(lines: List[Any]) -> List[Dict[str, Any]]:
    return [line.to_dict() if isinstance(line, RecipeIngredientLine) else line for line in lines]


class CatalogRepository(ABC):
    """Master ingredient and recipe storage."""

    # ------------------------------------------------------------------
    # Storage primitives (implemented by backends)
    # ------------------------------------------------------------------

    @abstractmethod
    def list_master_ingredients(self) -> List[MasterIngredientData]:
        """All master ingredients, sorted by name."""

    @abstractmethod
    def find_master_ingredient(self, name: str) -> Optional[MasterIngredientData]:
        """Master ingredient with exactly this name, or None."""

    @abstractmethod
    def _insert_ingredient(
        self, name: str, price_per_kg: Decimal, brand: Optional[str]
    ) -> MasterIngredientData:
        """Store a new ingredient; raise IngredientNameExists on a duplicate name."""

    @abstractmethod
    def _update_ingredient(self, name: str, changes: Dict[str, Any]) -> MasterIngredientData:
        """Apply price/brand changes; raise MasterIngredientNotFound."""

    @abstractmethod
    def _rename_ingredient(self, old_name: str, new_name: str) -> MasterIngredientData:
        """Rename an ingredient and the recipe lines using it, all or nothing."""

    @abstractmethod
    def _delete_ingredient(self, name: str) -> None:
        """Remove an ingredient; raise MasterIngredientNotFound."""

    @abstractmethod
    def list_recipes(self, include_hidden: bool = True) -> List[RecipeData]:
        """Recipes sorted by name."""

    @abstractmethod
    def find_recipe(self, recipe_id: Any) -> Optional[RecipeData]:
        """Recipe with this id, or None."""

    @abstractmethod
    def _insert_recipe(
        self, fields: Dict[str, Any], lines: List[RecipeIngredientLine]
    ) -> RecipeData:
        """Store a new recipe with its lines."""

    @abstractmethod
    def _update_recipe(
        self,
        recipe_id: Any,
        fields: Dict[str, Any],
        lines: Optional[List[RecipeIngredientLine]],
    ) -> RecipeData:
        """Update recipe fields; replace all lines when lines is not None."""

    @abstractmethod
    def _delete_recipe(self, recipe_id: Any) -> None:
        """Remove a recipe and its lines; raise RecipeNotFound."""

    # ------------------------------------------------------------------
    # Master ingredients
    # ------------------------------------------------------------------

    def get_master_ingredient(self, name: str) -> MasterIngredientData:
        """
        Get a master ingredient by name.

        Raises:
            MasterIngredientNotFound: If no ingredient has this name
        """
        ingredient = self.find_master_ingredient(name)
        if ingredient is None:
            raise MasterIngredientNotFound(name)
        return ingredient

    def add_master_ingredient(
        self, name: str, price_per_kg: Any, brand: Optional[str] = None
    ) -> MasterIngredientData:
        """
        Add an ingredient to the master price list.

        Raises:
            ValidationError: If name is empty or price is negative
            IngredientNameExists: If the name is already used
        """
        name = _strip(name)
        is_valid, errors = validate_master_ingredient_data(
            {"name": name, "price_per_kg": price_per_kg, "brand": brand}
        )
        if not is_valid:
            raise ValidationError(errors)

        ingredient = self._insert_ingredient(name, to_decimal(price_per_kg), brand or None)
        log_operation(
            logger,
            operation="add_master_ingredient",
            outcome="success",
            ingredient_name=name,
            price_per_kg=str(ingredient.price_per_kg),
        )
        return ingredient

    def update_master_ingredient(
        self, name: str, price_per_kg: Any = None, brand: Any = _UNSET
    ) -> MasterIngredientData:
        """
        Change an ingredient's price and/or brand.

        Args:
            name: Ingredient to update
            price_per_kg: New price, or None to keep the current one
            brand: New brand; pass None to clear it, omit to keep it

        Raises:
            ValidationError: If the new price is negative
            MasterIngredientNotFound: If no ingredient has this name
        """
        changes: Dict[str, Any] = {}
        if price_per_kg is not None:
            is_valid, errors = validate_master_ingredient_data(
                {"name": name, "price_per_kg": price_per_kg}
            )
            if not is_valid:
                raise ValidationError(errors)
            changes["price_per_kg"] = to_decimal(price_per_kg)
        if brand is not _UNSET:
            changes["brand"] = brand or None

        ingredient = self._update_ingredient(name, changes)
        log_operation(
            logger,
            operation="update_master_ingredient",
            outcome="success",
            ingredient_name=name,
            changed_fields=sorted(changes),
        )
        return ingredient

    def upsert_master_ingredient(
        self, name: str, price_per_kg: Any, brand: Optional[str] = None
    ) -> MasterIngredientData:
        """Update the ingredient with this name, or add it if there is none."""
        name = _strip(name)
        if self.find_master_ingredient(name) is not None:
            return self.update_master_ingredient(name, price_per_kg=price_per_kg, brand=brand)
        return self.add_master_ingredient(name, price_per_kg, brand)

    def rename_master_ingredient(self, old_name: str, new_name: str) -> MasterIngredientData:
        """
        Rename a master ingredient.

        Recipe lines that referenced the old name are moved to the new one in
        the same step, so no recipe silently loses its price.

        Raises:
            ValidationError: If the new name is empty or too long
            MasterIngredientNotFound: If old_name does not exist
            IngredientNameExists: If new_name is already used
        """
        new_name = _strip(new_name)
        errors = []
        for is_valid, error in (
            validate_required_string(new_name, "Name"),
            validate_string_length(new_name, MAX_NAME_LENGTH, "Name"),
        ):
            if not is_valid:
                errors.append(error)
        if errors:
            raise ValidationError(errors)

        if new_name == old_name:
            return self.get_master_ingredient(old_name)

        ingredient = self._rename_ingredient(old_name, new_name)
        log_operation(
            logger,
            operation="rename_master_ingredient",
            outcome="success",
            old_name=old_name,
            new_name=new_name,
        )
        return ingredient

    def delete_master_ingredient(self, name: str) -> None:
        """
        Delete a master ingredient.

        Recipe lines using it are kept and cost zero until it is re-added.

        Raises:
            MasterIngredientNotFound: If no ingredient has this name
        """
        self._delete_ingredient(name)
        log_operation(
            logger, operation="delete_master_ingredient", outcome="success", ingredient_name=name
        )

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def get_recipe(self, recipe_id: Any) -> RecipeData:
        """
        Get a recipe by id.

        Raises:
            RecipeNotFound: If the recipe doesn't exist
        """
        recipe = self.find_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    def find_recipe_by_name(self, name: str) -> Optional[RecipeData]:
        """First recipe (by id order of the listing) with exactly this name."""
        for recipe in self.list_recipes(include_hidden=True):
            if recipe.name == name:
                return recipe
        return None

    def _price_for(self, fields: Dict[str, Any], lines, selling_price: Any) -> Decimal:
        draft = RecipeData(id=None, name=fields["name"], overheads=fields["overheads"], ingredients=lines)
        cost = calculate_recipe_cost(draft, self.list_master_ingredients())
        return resolve_selling_price(cost.final_cost, selling_price)

    def add_recipe(
        self,
        recipe_fields: Dict[str, Any],
        lines: List[Any],
        selling_price: Any = None,
    ) -> RecipeData:
        """
        Create a recipe with its ingredient lines.

        The selling price is the recommended price for the recipe's final
        cost against the current master list, unless a manual price is given.

        Args:
            recipe_fields: name, overheads and optional descriptive fields
            lines: Ingredient lines (dicts or RecipeIngredientLine)
            selling_price: Manual selling price, or None to use the policy

        Raises:
            ValidationError: If recipe fields or any line fails validation
            InvalidUnit: If a line unit cannot be costed
        """
        is_valid, errors = validate_recipe_data(
            {**recipe_fields, "selling_price": selling_price}, _line_dicts(lines)
        )
        if not is_valid:
            raise ValidationError(errors)

        fields = _clean_recipe_fields(recipe_fields)
        fields["name"] = fields["name"].strip()
        clean_lines = _clean_lines(lines)
        fields["selling_price"] = self._price_for(fields, clean_lines, selling_price)
        fields["is_hidden"] = bool(recipe_fields.get("is_hidden", False))

        recipe = self._insert_recipe(fields, clean_lines)
        log_operation(
            logger,
            operation="add_recipe",
            outcome="success",
            recipe_id=recipe.id,
            recipe_name=recipe.name,
            selling_price=str(recipe.selling_price),
        )
        return recipe

    def update_recipe(
        self,
        recipe_id: Any,
        recipe_fields: Dict[str, Any],
        lines: Optional[List[Any]] = None,
        selling_price: Any = None,
    ) -> RecipeData:
        """
        Update a recipe, optionally replacing all of its lines.

        The selling price is recalculated from the updated recipe unless a
        manual price is given.

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            ValidationError: If the merged recipe fails validation
        """
        current = self.get_recipe(recipe_id)
        merged = {key: getattr(current, key) for key in RECIPE_FIELDS}
        merged.update({key: recipe_fields[key] for key in RECIPE_FIELDS if key in recipe_fields})

        is_valid, errors = validate_recipe_data(
            {**merged, "selling_price": selling_price},
            _line_dicts(lines) if lines is not None else None,
        )
        if not is_valid:
            raise ValidationError(errors)

        fields = _clean_recipe_fields(merged)
        fields["name"] = fields["name"].strip()
        clean_lines = _clean_lines(lines) if lines is not None else None
        fields["selling_price"] = self._price_for(
            fields, clean_lines if clean_lines is not None else current.ingredients, selling_price
        )

        recipe = self._update_recipe(recipe_id, fields, clean_lines)
        log_operation(
            logger,
            operation="update_recipe",
            outcome="success",
            recipe_id=recipe_id,
            lines_replaced=lines is not None,
        )
        return recipe

    def set_recipe_visibility(self, recipe_id: Any, is_hidden: bool) -> RecipeData:
        """Hide or show a recipe. Visibility never affects costing."""
        self.get_recipe(recipe_id)
        recipe = self._update_recipe(recipe_id, {"is_hidden": bool(is_hidden)}, None)
        log_operation(
            logger,
            operation="set_recipe_visibility",
            outcome="success",
            recipe_id=recipe_id,
            is_hidden=recipe.is_hidden,
        )
        return recipe

    def delete_recipe(self, recipe_id: Any) -> None:
        """
        Delete a recipe together with its ingredient lines.

        Raises:
            RecipeNotFound: If the recipe doesn't exist
        """
        self._delete_recipe(recipe_id)
        log_operation(logger, operation="delete_recipe", outcome="success", recipe_id=recipe_id)


# ============================================================================
# In-memory backend
# ============================================================================


class InMemoryCatalogRepository(CatalogRepository):
    """Catalog held in dictionaries of immutable values."""

    def __init__(
        self,
        master_ingredients: Optional[List[Any]] = None,
        recipes: Optional[List[Any]] = None,
    ):
        self._ingredients: Dict[str, MasterIngredientData] = {}
        self._recipes: Dict[Any, RecipeData] = {}
        self._ingredient_ids = itertools.count(1)
        self._recipe_ids = itertools.count(1)

        for item in master_ingredients or []:
            data = item if isinstance(item, MasterIngredientData) else MasterIngredientData.from_dict(item)
            self._insert_ingredient(data.name, data.price_per_kg, data.brand)

        for item in recipes or []:
            data = item if isinstance(item, RecipeData) else RecipeData.from_dict(item)
            self._store_loaded_recipe(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryCatalogRepository":
        """Build from {"master_ingredients": [...], "recipes": [...]}."""
        return cls(
            master_ingredients=data.get("master_ingredients", []),
            recipes=data.get("recipes", []),
        )

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "InMemoryCatalogRepository":
        """Build from a JSON catalog file."""
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def _next_recipe_id(self) -> int:
        recipe_id = next(self._recipe_ids)
        while recipe_id in self._recipes:
            recipe_id = next(self._recipe_ids)
        return recipe_id

    def _store_loaded_recipe(self, data: RecipeData) -> None:
        # Loaded recipes keep their stored selling price and id
        recipe_id = data.id if data.id is not None else self._next_recipe_id()
        self._recipes[recipe_id] = RecipeData(**{**data.__dict__, "id": recipe_id})

    # Master ingredients

    def list_master_ingredients(self) -> List[MasterIngredientData]:
        return [self._ingredients[name] for name in sorted(self._ingredients)]

    def find_master_ingredient(self, name: str) -> Optional[MasterIngredientData]:
        return self._ingredients.get(name)

    def _insert_ingredient(self, name, price_per_kg, brand):
        if name in self._ingredients:
            raise IngredientNameExists(name)
        ingredient = MasterIngredientData(
            id=next(self._ingredient_ids), name=name, price_per_kg=price_per_kg, brand=brand
        )
        self._ingredients[name] = ingredient
        return ingredient

    def _update_ingredient(self, name, changes):
        current = self.get_master_ingredient(name)
        updated = MasterIngredientData(**{**current.__dict__, **changes})
        self._ingredients[name] = updated
        return updated

    def _rename_ingredient(self, old_name, new_name):
        current = self.get_master_ingredient(old_name)
        if new_name in self._ingredients:
            raise IngredientNameExists(new_name)

        renamed = MasterIngredientData(**{**current.__dict__, "name": new_name})
        # Build every replacement first so a failure leaves storage untouched
        new_recipes = {}
        for recipe_id, recipe in self._recipes.items():
            if any(line.ingredient_name == old_name for line in recipe.ingredients):
                lines = tuple(
                    RecipeIngredientLine(new_name, line.quantity, line.unit)
                    if line.ingredient_name == old_name
                    else line
                    for line in recipe.ingredients
                )
                new_recipes[recipe_id] = RecipeData(**{**recipe.__dict__, "ingredients": lines})

        ingredients = {
            (new_name if name == old_name else name): (renamed if name == old_name else value)
            for name, value in self._ingredients.items()
        }
        self._ingredients = ingredients
        self._recipes.update(new_recipes)
        return renamed

    def _delete_ingredient(self, name):
        if name not in self._ingredients:
            raise MasterIngredientNotFound(name)
        del self._ingredients[name]

    # Recipes

    def list_recipes(self, include_hidden: bool = True) -> List[RecipeData]:
        recipes = [r for r in self._recipes.values() if include_hidden or not r.is_hidden]
        return sorted(recipes, key=lambda r: (r.name, str(r.id)))

    def find_recipe(self, recipe_id: Any) -> Optional[RecipeData]:
        return self._recipes.get(recipe_id)

    def _insert_recipe(self, fields, lines):
        recipe = RecipeData(id=self._next_recipe_id(), ingredients=tuple(lines), **fields)
        self._recipes[recipe.id] = recipe
        return recipe

    def _update_recipe(self, recipe_id, fields, lines):
        current = self.get_recipe(recipe_id)
        values = {**current.__dict__, **fields}
        if lines is not None:
            values["ingredients"] = tuple(lines)
        updated = RecipeData(**values)
        self._recipes[recipe_id] = updated
        return updated

    def _delete_recipe(self, recipe_id):
        if recipe_id not in self._recipes:
            raise RecipeNotFound(recipe_id)
        del self._recipes[recipe_id]

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the whole catalog as plain dictionaries."""
        return copy.deepcopy(
            {
                "master_ingredients": [i.to_dict() for i in self.list_master_ingredients()],
                "recipes": [r.to_dict() for r in self.list_recipes()],
            }
        )


# ============================================================================
# SQL backend
# ============================================================================


class SqlCatalogRepository(CatalogRepository):
    """Catalog stored through SQLAlchemy, one transaction per operation."""

    # Master ingredients

    def list_master_ingredients(self) -> List[MasterIngredientData]:
        try:
            with session_scope() as session:
                rows = session.query(MasterIngredient).order_by(MasterIngredient.name).all()
                return [row.to_dto() for row in rows]
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to list master ingredients", e)

    def find_master_ingredient(self, name: str) -> Optional[MasterIngredientData]:
        try:
            with session_scope() as session:
                row = session.query(MasterIngredient).filter_by(name=name).first()
                return row.to_dto() if row else None
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up ingredient '{name}'", e)

    def _insert_ingredient(self, name, price_per_kg, brand):
        try:
            with session_scope() as session:
                if session.query(MasterIngredient).filter_by(name=name).first():
                    raise IngredientNameExists(name)
                row = MasterIngredient(name=name, price_per_kg=price_per_kg, brand=brand)
                session.add(row)
                session.flush()
                return row.to_dto()
        except IngredientNameExists:
            raise
        except IntegrityError:
            raise IngredientNameExists(name)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to add ingredient '{name}'", e)

    def _update_ingredient(self, name, changes):
        try:
            with session_scope() as session:
                row = session.query(MasterIngredient).filter_by(name=name).first()
                if row is None:
                    raise MasterIngredientNotFound(name)
                row.update_from_dict(changes)
                session.flush()
                return row.to_dto()
        except MasterIngredientNotFound:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to update ingredient '{name}'", e)

    def _rename_ingredient(self, old_name, new_name):
        try:
            with session_scope() as session:
                row = session.query(MasterIngredient).filter_by(name=old_name).first()
                if row is None:
                    raise MasterIngredientNotFound(old_name)
                if session.query(MasterIngredient).filter_by(name=new_name).first():
                    raise IngredientNameExists(new_name)

                row.update_from_dict({"name": new_name})
                session.query(RecipeIngredient).filter(
                    RecipeIngredient.ingredient_name == old_name
                ).update({RecipeIngredient.ingredient_name: new_name}, synchronize_session=False)
                session.flush()
                return row.to_dto()
        except (MasterIngredientNotFound, IngredientNameExists):
            raise
        except IntegrityError:
            raise IngredientNameExists(new_name)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to rename ingredient '{old_name}'", e)

    def _delete_ingredient(self, name):
        try:
            with session_scope() as session:
                row = session.query(MasterIngredient).filter_by(name=name).first()
                if row is None:
                    raise MasterIngredientNotFound(name)
                session.delete(row)
        except MasterIngredientNotFound:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to delete ingredient '{name}'", e)

    # Recipes

    def list_recipes(self, include_hidden: bool = True) -> List[RecipeData]:
        try:
            with session_scope() as session:
                query = session.query(Recipe)
                if not include_hidden:
                    query = query.filter(Recipe.is_hidden == False)  # noqa: E712
                rows = query.order_by(Recipe.name, Recipe.id).all()
                return [row.to_dto() for row in rows]
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to list recipes", e)

    def find_recipe(self, recipe_id: Any) -> Optional[RecipeData]:
        try:
            with session_scope() as session:
                row = session.get(Recipe, recipe_id)
                return row.to_dto() if row else None
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to retrieve recipe {recipe_id}", e)

    def _insert_recipe(self, fields, lines):
        try:
            with session_scope() as session:
                row = Recipe(**fields)
                row.recipe_ingredients = [
                    RecipeIngredient(
                        ingredient_name=line.ingredient_name,
                        quantity=line.quantity,
                        unit=line.unit,
                    )
                    for line in lines
                ]
                session.add(row)
                session.flush()
                return row.to_dto()
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to create recipe", e)

    def _update_recipe(self, recipe_id, fields, lines):
        try:
            with session_scope() as session:
                row = session.get(Recipe, recipe_id)
                if row is None:
                    raise RecipeNotFound(recipe_id)
                row.update_from_dict(fields)
                if lines is not None:
                    # delete-orphan cascade removes the old lines
                    row.recipe_ingredients = [
                        RecipeIngredient(
                            ingredient_name=line.ingredient_name,
                            quantity=line.quantity,
                            unit=line.unit,
                        )
                        for line in lines
                    ]
                session.flush()
                return row.to_dto()
        except RecipeNotFound:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to update recipe {recipe_id}", e)

    def _delete_recipe(self, recipe_id):
        try:
            with session_scope() as session:
                row = session.get(Recipe, recipe_id)
                if row is None:
                    raise RecipeNotFound(recipe_id)
                session.delete(row)
        except RecipeNotFound:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to delete recipe {recipe_id}", e)


def get_catalog_repository(backend: Optional[str] = None) -> CatalogRepository:
    """
    Build the catalog repository for a backend name.

    Args:
        backend: 'sql' or 'memory'; defaults to the configured backend

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = backend or get_config().backend
    if backend == "sql":
        return SqlCatalogRepository()
    if backend == "memory":
        return InMemoryCatalogRepository()
    raise ValueError(f"Unknown catalog backend '{backend}'")
