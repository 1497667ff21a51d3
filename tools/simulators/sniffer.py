"""Simulated sniffer: sends heartbeats and beacon sightings over UDP."""

from __future__ import annotations

import argparse
import random
import socket
import time

from dotenv import load_dotenv

from backend.app.config import get_settings
from schemas.frames import BeaconSighting, Heartbeat

load_dotenv()
settings = get_settings()

SENSOR_ADDRESS = "ca:fe:69:c5:11:00"
BEACONS = [
    ("be:ef:34:25:69:01", -58),
    ("be:ef:34:25:69:02", -71),
    ("be:ef:34:25:69:03", -83),
]


def now_millis() -> int:
    return int(time.time() * 1000)


def next_sighting(sensor: str) -> BeaconSighting:
    beacon, base_rssi = random.choice(BEACONS)
    return BeaconSighting(
        sensor_address=sensor,
        observed_at_millis=now_millis(),
        beacon_address=beacon,
        signal_strength=base_rssi + random.randint(-6, 6),
    )


def run_sniffer(host: str, port: int, sensor: str, interval: float, heartbeat_every: int) -> None:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    print(f"[sniffer {sensor}] sending to {host}:{port}")

    tick = 0
    while True:
        if tick % heartbeat_every == 0:
            frame = Heartbeat(sensor_address=sensor, observed_at_millis=now_millis())
        else:
            frame = next_sighting(sensor)
        sock.sendto(frame.to_wire(), (host, port))
        print(f"[sniffer {sensor}] {frame.to_wire().decode('utf-8')}")
        tick += 1
        time.sleep(interval)


def main() -> None:
    parser = argparse.ArgumentParser(description="Send simulated sniffer datagrams")
    parser.add_argument("--host", default=settings.simulator_target_host())
    parser.add_argument("--port", type=int, default=settings.udp_port)
    parser.add_argument("--sensor", default=SENSOR_ADDRESS)
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--heartbeat-every", type=int, default=10)
    args = parser.parse_args()
    run_sniffer(args.host, args.port, args.sensor, args.interval, max(1, args.heartbeat_every))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n[!] sniffer simulator stopped.")
