"""
Flask CLI commands.

    flask --app jewelry_storefront.app:create_app init-db
    flask --app jewelry_storefront.app:create_app create-admin owner@example.com
    flask --app jewelry_storefront.app:create_app seed

``seed`` is idempotent: categories and products are matched by name and
only missing ones are inserted.
"""

import click
from flask import Flask, current_app

from jewelry_storefront.core.dependencies import EXTENSION_KEY
from jewelry_storefront.core.exceptions import BaseAPIException
from jewelry_storefront.db import Database
from jewelry_storefront.models.user import Role
from jewelry_storefront.repositories import CategoryRepository, ProductRepository
from jewelry_storefront.services.auth_service import AuthService

DEMO_CATEGORIES = [
    ("Rings", "Engagement rings, wedding bands and statement pieces"),
    ("Necklaces", "Chains, pendants and pearl strands"),
    ("Earrings", "Studs, hoops and drops"),
    ("Bracelets", "Tennis bracelets, bangles and cuffs"),
]

DEMO_PRODUCTS = [
    {
        "name": "Diamond Solitaire Ring",
        "description": "Classic 1 carat diamond solitaire set in 14k white gold.",
        "category": "Rings",
        "b2c_price_cents": 250000,
        "b2b_price_cents": 180000,
        "min_quantity_b2b": 2,
        "sku": "RNG-DIA-001",
        "material": "14k White Gold",
    },
    {
        "name": "Pearl Necklace",
        "description": "Freshwater cultured pearls, hand-knotted on silk.",
        "category": "Necklaces",
        "b2c_price_cents": 45000,
        "b2b_price_cents": 32000,
        "min_quantity_b2b": 5,
        "sku": "NCK-PRL-001",
        "material": "Freshwater Pearl",
    },
    {
        "name": "Gold Hoop Earrings",
        "description": "Polished 18k gold hoops, 30mm.",
        "category": "Earrings",
        "b2c_price_cents": 18000,
        "b2b_price_cents": 13000,
        "min_quantity_b2b": 10,
        "sku": "EAR-GLD-001",
        "material": "18k Yellow Gold",
    },
    {
        "name": "Emerald Tennis Bracelet",
        "description": "Channel-set emeralds in sterling silver.",
        "category": "Bracelets",
        "b2c_price_cents": 120000,
        "b2b_price_cents": 85000,
        "min_quantity_b2b": 3,
        "sku": "BRC-EMR-001",
        "material": "Sterling Silver",
    },
    {
        "name": "Sapphire Pendant",
        "description": "Oval blue sapphire with a diamond halo on a fine chain.",
        "category": "Necklaces",
        "b2c_price_cents": 80000,
        "b2b_price_cents": 58000,
        "min_quantity_b2b": 4,
        "sku": "NCK-SAP-001",
        "material": "14k White Gold",
    },
    {
        "name": "Wedding Band Set",
        "description": "Matching his and hers bands in brushed platinum.",
        "category": "Rings",
        "b2c_price_cents": 150000,
        "b2b_price_cents": 110000,
        "min_quantity_b2b": 2,
        "sku": "RNG-WED-001",
        "material": "Platinum",
    },
]


def _container():
    return current_app.extensions[EXTENSION_KEY]


def seed_demo_catalog(category_repo: CategoryRepository, product_repo: ProductRepository) -> int:
    """Insert whatever part of the demo catalog is missing; returns products added"""
    category_ids = {}
    for name, description in DEMO_CATEGORIES:
        existing = category_repo.get_by_name(name)
        category = existing or category_repo.create_category(name=name, description=description)
        category_ids[name] = category.id

    existing_names = {product.name for product in product_repo.list_products()}
    added = 0
    for item in DEMO_PRODUCTS:
        if item["name"] in existing_names:
            continue
        values = {key: value for key, value in item.items() if key != "category"}
        values["category_id"] = category_ids[item["category"]]
        values["in_stock"] = True
        product_repo.create_product(values)
        added += 1
    return added


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        _container().get(Database).create_all()
        click.echo("  [+] Tables created")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.password_option()
    @click.option("--name", default=None, help="Display name for the admin")
    def create_admin(email, password, name):
        """Create an administrator account."""
        try:
            profile = _container().get(AuthService).sign_up(
                email=email,
                password=password,
                full_name=name,
                role=Role.ADMIN.value,
                is_approved=True,
            )
        except BaseAPIException as e:
            raise click.ClickException(e.message)
        click.echo(f"  [+] Admin {profile.email} created (id {profile.id})")

    @app.cli.command("seed")
    def seed():
        """Load the demo jewelry catalog."""
        container = _container()
        added = seed_demo_catalog(container.get(CategoryRepository), container.get(ProductRepository))
        click.echo("  [+] Categories seeded")
        click.echo(f"  [+] {added} products added")
