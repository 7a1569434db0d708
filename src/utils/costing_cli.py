"""
Costing CLI Utility

Command-line access to recipe costing, the indent and bulk ingredient
import. Works against a JSON catalog file or the application database.

Usage Examples:
    # Cost one recipe from a catalog file, scaled to 3 batches
    podi-tracker --catalog catalog.json cost "Sambar Powder" --quantity 3

    # Indent for several recipes from the database
    podi-tracker indent "Sambar Powder=2" "Rasam Powder=1"

    # Upsert master ingredients into the database
    podi-tracker import-ingredients ingredients.json

A catalog file looks like:
    {"master_ingredients": [{"name": "Coriander Seeds", "price_per_kg": 120}],
     "recipes": [{"name": "Sambar Powder", "overheads": 20,
                  "ingredients": [{"ingredient_name": "Coriander Seeds",
                                   "quantity": 200, "unit": "g"}]}]}
"""

import argparse
import logging
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from src.services.costing_service import summarize_recipe
from src.services.database import configure_database, init_database, initialize_app_database
from src.services.exceptions import ServiceError
from src.services.indent_service import aggregate_indent
from src.services.ingredient_import_service import import_master_ingredients, load_rows
from src.services.recipe_scaling_service import scale_recipe
from src.services.repository import (
    CatalogRepository,
    InMemoryCatalogRepository,
    SqlCatalogRepository,
)
from src.services.unit_converter import format_currency, format_quantity
from src.utils.constants import APP_NAME, APP_VERSION, CURRENCY_SYMBOL

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A user-facing problem with the command's arguments or data."""


def format_table(rows: List[List[str]]) -> str:
    """Left-align every column to its widest cell."""
    if not rows:
        return ""
    widths = [max(len(str(row[i])) for row in rows if i < len(row)) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        cells = [str(cell).ljust(widths[i]) for i, cell in enumerate(row)]
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines)


def parse_quantity_args(pairs: Sequence[str]) -> Dict[str, str]:
    """
    Parse NAME=QTY arguments.

    The last '=' separates name and quantity, so recipe names may contain '='.

    Raises:
        CommandError: If an argument has no '=' or an empty name
    """
    quantities = {}
    for pair in pairs:
        name, separator, quantity = pair.rpartition("=")
        if not separator or not name.strip():
            raise CommandError(f"Expected NAME=QTY, got {pair!r}")
        quantities[name.strip()] = quantity.strip()
    return quantities


def _open_repository(catalog: Optional[str], database: Optional[str]) -> CatalogRepository:
    if catalog:
        return InMemoryCatalogRepository.load_json(catalog)
    if database:
        init_database(configure_database(database))
    else:
        initialize_app_database()
    return SqlCatalogRepository()


def cost_recipe(repository: CatalogRepository, recipe_name: str, quantity: str) -> int:
    """Print the cost sheet of one recipe."""
    recipe = repository.find_recipe_by_name(recipe_name)
    if recipe is None:
        raise CommandError(f"Recipe '{recipe_name}' not found")

    master_list = repository.list_master_ingredients()
    summary = summarize_recipe(recipe, master_list)
    cost = summary.cost

    rows = [["Ingredient", "Quantity", "Price/kg", "Cost"]]
    for line_cost in cost.line_costs:
        rows.append(
            [
                line_cost.line.ingredient_name,
                format_quantity(line_cost.line.quantity, line_cost.line.unit),
                format_currency(line_cost.price_per_kg) if line_cost.is_resolved else "-",
                format_currency(line_cost.cost),
            ]
        )

    print(f"Recipe: {recipe.name}")
    print(format_table(rows))
    print()
    print(f"Raw material cost:  {format_currency(cost.raw_material_cost)}")
    print(f"Overheads:          {format_currency(cost.overheads)}")
    print(f"Final cost:         {format_currency(cost.final_cost)}")
    print(f"Recommended price:  {format_currency(summary.recommended_price)}")
    print(f"Selling price:      {format_currency(summary.selling_price)}")
    if summary.profit_margin is not None:
        margin = summary.profit_margin.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        print(f"Profit margin:      {margin}%")
    if cost.unresolved_ingredients:
        print(f"Not in master list (costed at 0): {', '.join(cost.unresolved_ingredients)}")

    scaled = scale_recipe(recipe, cost, quantity)
    if scaled.multiplier != 1:
        print()
        print(f"Scaled x{scaled.multiplier}:")
        scaled_rows = [["Ingredient", "Quantity"]]
        for line in scaled.scaled_ingredients:
            scaled_rows.append([line.ingredient_name, format_quantity(line.quantity, line.unit)])
        print(format_table(scaled_rows))
        print(f"Scaled final cost:     {format_currency(scaled.scaled_final_cost)}")
        print(f"Scaled selling price:  {format_currency(scaled.scaled_selling_price)}")
    return 0


def print_indent(repository: CatalogRepository, pairs: Sequence[str]) -> int:
    """Print the indent for NAME=QTY selections of visible recipes."""
    requested = parse_quantity_args(pairs)
    recipes = repository.list_recipes(include_hidden=False)

    by_name = {}
    for recipe in recipes:
        by_name.setdefault(recipe.name, recipe)
    missing = sorted(name for name in requested if name not in by_name)
    if missing:
        raise CommandError(f"Unknown recipe(s): {', '.join(missing)}")

    desired = {by_name[name].id: quantity for name, quantity in requested.items()}
    report = aggregate_indent(recipes, desired, repository.list_master_ingredients())

    if report.is_empty:
        print("No recipes selected")
        return 0

    print(format_table(report.to_rows(CURRENCY_SYMBOL)))
    if report.unresolved_ingredients:
        print(f"\nNot in master list (costed at 0): {', '.join(report.unresolved_ingredients)}")
    return 0


def import_ingredients(repository: CatalogRepository, file_path: str) -> int:
    """Upsert master ingredient rows from a JSON file."""
    print(f"Importing ingredients from {file_path}...")
    result = import_master_ingredients(load_rows(file_path), repository)
    print(result.get_summary())
    return 0 if result.failed == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podi-tracker",
        description=f"{APP_NAME} recipe costing and indent tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Cost a recipe scaled to 3 batches:
    podi-tracker --catalog catalog.json cost "Sambar Powder" --quantity 3

  Indent for two recipes:
    podi-tracker indent "Sambar Powder=2" "Rasam Powder=1"

  Import master ingredients into the database:
    podi-tracker import-ingredients ingredients.json
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--catalog", help="JSON catalog file to read instead of the database")
    source.add_argument("--database", help="SQLAlchemy database URL (default: configured database)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    cost_parser = subparsers.add_parser("cost", help="Cost one recipe")
    cost_parser.add_argument("recipe", help="Recipe name")
    cost_parser.add_argument(
        "-q", "--quantity", default="1", help="Batch multiplier (default: 1)"
    )

    indent_parser = subparsers.add_parser("indent", help="Ingredient indent for several recipes")
    indent_parser.add_argument("selections", nargs="+", metavar="NAME=QTY")

    import_parser = subparsers.add_parser(
        "import-ingredients", help="Upsert master ingredients from a JSON file"
    )
    import_parser.add_argument("file", help="JSON file with Name/Brand/Price rows")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "import-ingredients" and args.catalog:
            raise CommandError("import-ingredients writes to the database; omit --catalog")
        repository = _open_repository(args.catalog, args.database)
        if args.command == "cost":
            return cost_recipe(repository, args.recipe, args.quantity)
        elif args.command == "indent":
            return print_indent(repository, args.selections)
        elif args.command == "import-ingredients":
            return import_ingredients(repository, args.file)
    except (CommandError, ServiceError, ValueError, KeyError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}")
        return 1

    print(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
