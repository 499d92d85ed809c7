# Overview: Flask CLI command groups for bootstrap and development seeding.

# backend/studio/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "studio:create_app".
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (use "flask db upgrade" once migrations are in place).
# - python -m flask system seed-roles
#   Create the default roles (therapist, seller, admin). Idempotent.
#
# Staff (records are owned by the personnel collaborator; these are dev helpers):
# - python -m flask staff create --first-name Ana --role therapist --role seller
# - python -m flask staff issue-token --staff-id 1
#   Print a bearer token for the staff member.
# - python -m flask staff revoke-token --token <token>
# - python -m flask staff list
#
# Catalog and contacts (dev helpers):
# - python -m flask catalog add-service --name "Relaxing massage" --duration 60 --price-cents 2500000
# - python -m flask catalog add-product --name "Body oil" --stock 12 --stock-minimum 10 --price-cents 990000
# - python -m flask clients add --first-name Carla --phone "+56 9 1234 5678"

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Client, Product, Role, Service, Staff, StaffRole
from .services import session_service


def _default_role_names() -> list[str]:
    cfg = current_app.config
    return [cfg["THERAPIST_ROLE"], cfg["SELLER_ROLE"], cfg["ADMIN_ROLE"]]


def ensure_roles(names) -> dict[str, Role]:
    """Create missing roles by name; returns name -> Role."""
    roles = {}
    for name in names:
        role = db.session.query(Role).filter_by(name=name).first()
        if not role:
            role = Role(name=name)
            db.session.add(role)
            db.session.flush()
        roles[name] = role
    return roles


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Tables created")


@system_group.command('seed-roles')
@with_appcontext
def seed_roles():
    """Create default roles."""
    roles = ensure_roles(_default_role_names())
    db.session.commit()
    click.echo(f"PASS Roles ready: {', '.join(sorted(roles))}")


@click.group('staff')
def staff_group():
    """Staff development helpers."""


@staff_group.command('create')
@click.option('--first-name', required=True, help='First name')
@click.option('--last-name', default=None, help='Last name')
@click.option('--email', default=None, help='Email address')
@click.option('--role', 'role_names', multiple=True, help='Role name (repeatable)')
@with_appcontext
def create_staff_cli(first_name, last_name, email, role_names):
    """Create a staff member with roles."""
    staff = Staff(first_name=first_name, last_name=last_name, email=email, is_active=True)
    db.session.add(staff)
    db.session.flush()

    for name, role in ensure_roles(role_names).items():
        db.session.add(StaffRole(staff_id=staff.id, role_id=role.id))

    db.session.commit()
    click.echo(f"PASS Staff {staff.id} created ({staff.full_name}) roles={sorted(role_names)}")


@staff_group.command('issue-token')
@click.option('--staff-id', type=int, required=True, help='Staff ID')
@with_appcontext
def issue_token_cli(staff_id):
    """Mint a bearer token for a staff member."""
    try:
        record, token = session_service.create_session(
            db.session, staff_id, ttl_hours=current_app.config["SESSION_TTL_HOURS"]
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"Token (expires {record.expires_at:%Y-%m-%d %H:%M} UTC):")
    click.echo(token)


@staff_group.command('revoke-token')
@click.option('--token', required=True, help='Plaintext bearer token')
@with_appcontext
def revoke_token_cli(token):
    """Revoke a bearer token."""
    if not session_service.revoke_session(db.session, token):
        raise click.ClickException("Token not found or already revoked")
    click.echo("DONE Token revoked")


@staff_group.command('list')
@with_appcontext
def list_staff():
    """List staff members with roles and active status."""
    for staff in db.session.query(Staff).order_by(Staff.id).all():
        data = staff.to_dict()
        status = "active" if staff.is_active else "inactive"
        click.echo(f"{staff.id:>4}  {staff.full_name:<30} {status:<9} {', '.join(data['roles'])}")


@click.group('catalog')
def catalog_group():
    """Catalog development helpers."""


@catalog_group.command('add-service')
@click.option('--name', required=True)
@click.option('--duration', 'duration_minutes', type=click.IntRange(min=1), required=True, help='Minutes')
@click.option('--price-cents', type=click.IntRange(min=0), default=None)
@with_appcontext
def add_service_cli(name, duration_minutes, price_cents):
    service = Service(name=name, duration_minutes=duration_minutes, price_cents=price_cents, is_active=True)
    db.session.add(service)
    db.session.commit()
    click.echo(f"PASS Service {service.id} created: {name} ({duration_minutes} min)")


@catalog_group.command('add-product')
@click.option('--name', required=True)
@click.option('--brand', default=None)
@click.option('--stock', type=click.IntRange(min=0), default=0)
@click.option('--stock-minimum', type=click.IntRange(min=0), default=0)
@click.option('--price-cents', type=click.IntRange(min=0), default=None)
@with_appcontext
def add_product_cli(name, brand, stock, stock_minimum, price_cents):
    product = Product(
        name=name,
        brand=brand,
        stock=stock,
        stock_minimum=stock_minimum,
        price_cents=price_cents,
        is_active=True,
    )
    db.session.add(product)
    db.session.commit()
    click.echo(f"PASS Product {product.id} created: {name} stock={stock} minimum={stock_minimum}")


@click.group('clients')
def clients_group():
    """Client development helpers."""


@clients_group.command('add')
@click.option('--first-name', required=True)
@click.option('--last-name', default=None)
@click.option('--phone', default=None)
@click.option('--email', default=None)
@click.option('--address', default=None)
@with_appcontext
def add_client_cli(first_name, last_name, phone, email, address):
    client = Client(first_name=first_name, last_name=last_name, phone=phone, email=email, address=address)
    db.session.add(client)
    db.session.commit()
    click.echo(f"PASS Client {client.id} created: {client.full_name}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(staff_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(clients_group)
