from typing import Optional
from uuid import UUID

import asyncpg

from src.common.exceptions import DuplicatePlateError
from src.infra.database import DatabaseManager

VEHICLE_COLUMNS = {
    "make", "model", "year", "color", "license_plate", "vehicle_type", "is_active",
    "registration_number", "registration_expiry", "registration_document_url",
    "insurance_provider", "insurance_policy_number", "insurance_expiry", "insurance_document_url",
}

SYNC_USER_SUMMARY = """
    UPDATE users SET
        vehicle_id = $2,
        vehicle_make = $3,
        vehicle_model = $4,
        vehicle_year = $5,
        vehicle_color = $6,
        vehicle_plate = $7,
        updated_at = NOW()
    WHERE id = $1
"""

CLEAR_USER_SUMMARY = """
    UPDATE users SET
        vehicle_id = NULL,
        vehicle_make = NULL,
        vehicle_model = NULL,
        vehicle_year = NULL,
        vehicle_color = NULL,
        vehicle_plate = NULL,
        updated_at = NOW()
    WHERE id = $1 AND vehicle_id = $2
"""


class VehicleRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_vehicle(self, driver_id: UUID, vehicle_data: dict) -> dict:
        """
        Inserts the vehicle as the driver's only active one and mirrors it
        onto the user record, all in one transaction.
        """
        vehicle_data = {k: v for k, v in vehicle_data.items() if k in VEHICLE_COLUMNS}
        vehicle_data["driver_id"] = driver_id
        vehicle_data["is_active"] = True

        cols = ", ".join(vehicle_data.keys())
        placeholders = ", ".join(f"${i + 1}" for i in range(len(vehicle_data)))
        insert_query = f"INSERT INTO vehicles ({cols}) VALUES ({placeholders}) RETURNING *"

        try:
            async with self.db.transaction() as conn:
                await conn.execute(
                    "UPDATE vehicles SET is_active = FALSE, updated_at = NOW() "
                    "WHERE driver_id = $1 AND is_active",
                    driver_id,
                )
                row = await conn.fetchrow(insert_query, *vehicle_data.values())
                await conn.execute(
                    SYNC_USER_SUMMARY,
                    driver_id, row["id"], row["make"], row["model"],
                    row["year"], row["color"], row["license_plate"],
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicatePlateError() from e
        return dict(row)

    async def get_vehicle(self, vehicle_id: UUID) -> Optional[dict]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM vehicles WHERE id = $1", vehicle_id)
            return dict(row) if row else None

    async def get_vehicle_by_driver(self, driver_id: UUID) -> Optional[dict]:
        """Active vehicle first, otherwise the most recently registered one."""
        query = """
            SELECT * FROM vehicles
            WHERE driver_id = $1
            ORDER BY is_active DESC, created_at DESC
            LIMIT 1
        """
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(query, driver_id)
            return dict(row) if row else None

    async def update_vehicle(self, vehicle_id: UUID, fields: dict) -> Optional[dict]:
        fields = {k: v for k, v in fields.items() if k in VEHICLE_COLUMNS}
        if not fields:
            return await self.get_vehicle(vehicle_id)

        assignments = ", ".join(f"{col} = ${i + 2}" for i, col in enumerate(fields))
        query = f"""
            UPDATE vehicles SET {assignments}, updated_at = NOW()
            WHERE id = $1
            RETURNING *
        """
        try:
            async with self.db.transaction() as conn:
                row = await conn.fetchrow(query, vehicle_id, *fields.values())
                if row and row["is_active"]:
                    await conn.execute(
                        SYNC_USER_SUMMARY,
                        row["driver_id"], row["id"], row["make"], row["model"],
                        row["year"], row["color"], row["license_plate"],
                    )
        except asyncpg.UniqueViolationError as e:
            raise DuplicatePlateError() from e
        return dict(row) if row else None

    async def delete_vehicle(self, vehicle_id: UUID, driver_id: UUID) -> bool:
        async with self.db.transaction() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM vehicles WHERE id = $1 AND driver_id = $2 RETURNING id",
                vehicle_id, driver_id,
            )
            if deleted is None:
                return False
            await conn.execute(CLEAR_USER_SUMMARY, driver_id, vehicle_id)
            return True
