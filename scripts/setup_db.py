"""
Database setup script for Supabase.
Prints the table definitions to paste into the Supabase SQL Editor and
optionally seeds a starter price list and barber.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from db import get_db_client
from models.barber import BarberCreate
from models.service import ServiceCreate

SCHEMA_SQL = """
create table if not exists barbers (
    id uuid primary key default gen_random_uuid(),
    name text not null,
    nickname text,
    phone text,
    branch text,
    image_url text,
    is_active boolean not null default true,
    created_at timestamptz default now()
);

create table if not exists services (
    id uuid primary key default gen_random_uuid(),
    title text not null,
    description text,
    price numeric not null check (price >= 0),
    duration_minutes integer not null default 30,
    created_at timestamptz default now()
);

create table if not exists bookings (
    id uuid primary key default gen_random_uuid(),
    booking_id text not null,
    barber_id uuid references barbers(id),
    barber_name text,
    service_id uuid references services(id),
    service_name text,
    customer_name text not null,
    phone text not null,
    date text not null,
    time text not null,
    price numeric not null default 0,
    deposit_amount numeric not null default 0,
    discount numeric not null default 0,
    extra_fee numeric not null default 0,
    extra_note text,
    slip_url text,
    branch text,
    commission_amount numeric,
    status text not null default 'pending',
    created_at timestamptz default now(),
    updated_at timestamptz
);

-- Makes a reference taken between check and insert fail the insert
create unique index if not exists bookings_booking_id_key on bookings (booking_id);

create table if not exists commission_rates (
    barber_id uuid references barbers(id),
    service_id uuid references services(id),
    commission_fixed numeric not null default 0,
    primary key (barber_id, service_id)
);

create table if not exists commission_payments (
    id uuid primary key default gen_random_uuid(),
    barber_id uuid references barbers(id),
    amount numeric not null check (amount > 0),
    month_key text not null,
    note text,
    created_at timestamptz default now()
);
"""

SAMPLE_SERVICES = [
    ServiceCreate(title="Haircut", description="Cut and styling", price=300, duration_minutes=45),
    ServiceCreate(title="Haircut & Wash", description="Cut, wash and styling", price=350, duration_minutes=60),
    ServiceCreate(title="Beard Trim", description="Shape and line-up", price=150, duration_minutes=20),
]


async def seed_sample_data():
    """Create a starter price list and one barber."""
    db = get_db_client()

    existing = {s.title for s in await db.get_services()}
    created = 0
    for service in SAMPLE_SERVICES:
        if service.title in existing:
            continue
        await db.add_service(service)
        created += 1
        print(f"Created service: {service.title} ({service.price:.0f})")

    if not await db.get_barbers():
        barber = await db.add_barber(BarberCreate(name="Demo Barber", branch="main"))
        print(f"Created barber: {barber.name}")

    print(f"\n✅ Created {created} services")


async def main():
    """Main setup function."""
    print("🚀 Setting up database...")
    print("\nRun the following SQL in the Supabase SQL Editor first:\n")
    print(SCHEMA_SQL)

    try:
        get_db_client()
        print("✅ Database connection successful")

        response = input("\nSeed sample services and barber? (y/n): ")
        if response.lower() == "y":
            await seed_sample_data()

        print("\n✅ Database setup complete!")

    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
