"""Seed sample monitoring data for local development."""
from __future__ import annotations

from datetime import date, timedelta

from dotenv import load_dotenv

load_dotenv()

from app import models
from app.config import get_settings
from app.db import create_all, get_sessionmaker, init_engine
from app.services.dams import calculate_status, fill_percentage
from app.services.river import calculate_flood_risk
from app.utils.time import utcnow


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    init_engine()
    create_all()
    session = get_sessionmaker()()

    try:
        alice = models.User(username="alice", email="alice@example.com", phone_number="+919800000001")
        session.add(alice)

        station = models.Station(
            name="Patna Gandhi Ghat",
            river_name="Ganga",
            location={"lat": 25.62, "lng": 85.17},
            danger_level=48.6,
            flood_level=50.3,
            region="Bihar",
        )
        dam = models.Dam(
            name="Bhakra",
            location={"lat": 31.41, "lng": 76.43},
            total_capacity=9340.0,
            region="Himachal Pradesh",
        )
        well = models.GroundwaterWell(name="Jaipur OW-12", location={"lat": 26.91, "lng": 75.79}, region="Rajasthan")
        gauge = models.RainfallStation(name="Santacruz", location={"lat": 19.08, "lng": 72.84}, region="Maharashtra")
        session.add_all([station, dam, well, gauge])
        session.commit()

        now = utcnow()
        for hours, level in ((6, 46.1), (3, 47.9), (0, 49.2)):
            session.add(
                models.RiverLevel(
                    station_id=station.id,
                    level=level,
                    status=calculate_flood_risk(level, station.danger_level, station.flood_level),
                    timestamp=now - timedelta(hours=hours),
                )
            )
        percentage = fill_percentage(7820.0, dam.total_capacity)
        session.add(
            models.DamCapacity(
                dam_id=dam.id,
                storage=7820.0,
                capacity=dam.total_capacity,
                percentage=round(percentage, 2),
                status=calculate_status(percentage),
                timestamp=now,
            )
        )
        session.add(models.GroundwaterDepth(well_id=well.id, depth=23.4, season="pre-monsoon", timestamp=now))
        today = date.today()
        session.add_all(
            models.RainfallData(station_id=gauge.id, rainfall=mm, date=today - timedelta(days=offset))
            for offset, mm in enumerate((42.0, 118.5, 7.2))
        )
        session.add(
            models.AlertConfiguration(
                user_id=alice.id,
                entity_type=models.AlertType.RIVER,
                entity_id=str(station.id),
                threshold_operator=models.ThresholdOperator.GT,
                threshold_value=station.danger_level,
                channels=[models.NotificationChannel.EMAIL.value, models.NotificationChannel.SMS.value],
            )
        )
        session.commit()
        print("Seed data inserted.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
