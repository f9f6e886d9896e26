"""Category management commands."""

import click
from myfinance.domain.category import CategoryService
from myfinance.domain.entities import CATEGORY_TYPES
from myfinance.domain.requests import CreateCategoryRequest, UpdateCategoryRequest
from myfinance.cli.error_handling import handle_domain_error, require_user


def resolve_category_or_exit(ctx, service: CategoryService, user_id: str, category: str, category_type: str | None = None):
    """Resolve a category name or ID, or exit with a CLI error."""
    categories = service.list_categories(user_id, category_type)
    for cat in categories:
        if cat.id == category:
            return cat
    matches = [cat for cat in categories if cat.name.lower() == category.strip().lower()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        click.echo(f"Error: Category name '{category}' is ambiguous; use --type or the category ID", err=True)
    else:
        click.echo(f"Error: Category '{category}' not found", err=True)
    ctx.exit(1)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), help="Only list one type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories grouped under their parents."""
    user_id = require_user(ctx)
    service = CategoryService(ctx.obj["db"])

    groups = service.list_categories_with_subcategories(user_id, category_type)
    if not groups:
        click.echo("No categories found. Run 'category init' to create default categories.")
        return

    click.echo("\nCategories:")
    for group in groups:
        cat = group.category
        click.echo(f"{cat.name} [{cat.type}] {cat.color} (ID: {cat.id})")
        for child in group.subcategories:
            click.echo(f"  {child.name} (ID: {child.id})")


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category name or ID")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), default="expense", help="Category type (default: expense)")
@click.option("--color", default="", help="Display color; subcategories inherit the parent's by default")
@click.option("--icon", default="", help="Icon name")
@click.option("--description", default="", help="Description")
@click.pass_context
def create_category(ctx, name: str, parent: str | None, category_type: str, color: str, icon: str, description: str):
    """Create a new category."""
    user_id = require_user(ctx)
    service = CategoryService(ctx.obj["db"])

    parent_id = None
    if parent is not None:
        parent_id = resolve_category_or_exit(ctx, service, user_id, parent, category_type).id

    try:
        category = service.create_category(
            user_id,
            CreateCategoryRequest(
                name=name,
                type=category_type,
                description=description,
                color=color,
                icon=icon,
                parent_id=parent_id,
            ),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{category.name}'{parent_str} (ID: {category.id})")


@category_group.command("update")
@click.argument("category")
@click.option("--name", help="New name")
@click.option("--color", help="New color (propagates to subcategories)")
@click.option("--icon", help="New icon")
@click.option("--description", help="New description")
@click.option("--active/--inactive", "is_active", default=None, help="Activate or deactivate")
@click.option("--visible/--hidden", "visible", default=None, help="Show or hide")
@click.pass_context
def update_category(
    ctx,
    category: str,
    name: str | None,
    color: str | None,
    icon: str | None,
    description: str | None,
    is_active: bool | None,
    visible: bool | None,
):
    """Update a category."""
    user_id = require_user(ctx)
    service = CategoryService(ctx.obj["db"])
    cat = resolve_category_or_exit(ctx, service, user_id, category)

    try:
        updated = service.update_category(
            cat.id,
            user_id,
            UpdateCategoryRequest(
                name=name,
                description=description,
                color=color,
                icon=icon,
                is_active=is_active,
                visible=visible,
            ),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category '{updated.name}'")


@category_group.command("delete")
@click.argument("category")
@click.option("--purge", is_flag=True, help="Remove permanently, skipping the transaction check")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, category: str, purge: bool, yes: bool):
    """Delete a category and its subcategories."""
    user_id = require_user(ctx)
    service = CategoryService(ctx.obj["db"])
    cat = resolve_category_or_exit(ctx, service, user_id, category)

    if not yes and not click.confirm(f"Are you sure you want to delete category '{cat.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        if purge:
            service.hard_delete_category(cat.id, user_id)
        else:
            service.delete_category(cat.id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{cat.name}'")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default categories (existing ones are kept)."""
    user_id = require_user(ctx)
    service = CategoryService(ctx.obj["db"])

    created = service.seed_default_categories(user_id)
    click.echo(f"Created {created} categories.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
