"""
Manual check that stored parcels survive a server restart.

Starts the API with uvicorn, stores a parcel, restarts the server and
reads the parcel back. Carrier lookups are not exercised.
"""

import os
import signal
import subprocess
import sys
import time

import httpx

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"
SERVER_CMD = [sys.executable, "-m", "uvicorn", "parcel_tracker.app.main:app", "--host", "127.0.0.1", "--port", "8000"]


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("Server is up")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("Server failed to start")
    return False


def start_server():
    return subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"}
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server()

    try:
        if not wait_for_server():
            stdout, stderr = proc.communicate(timeout=2)
            print("Server Stdout:", stdout.decode())
            print("Server Stderr:", stderr.decode())
            raise RuntimeError("Server start failed")

        print("\n--- [Step 2] Storing Parcel ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/parcels", json={
            "tracking_number": "EF582568151TH",
            "country": "Japan",
            "description": "Persistence check",
        })
        if resp.status_code != 201:
            raise RuntimeError(f"Create failed: {resp.status_code} {resp.text}")
        parcel_id = resp.json()["id"]
        print(f"Stored parcel {parcel_id}")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # port release

    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        print("\n--- [Step 5] Reading Parcel Back ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/parcels/{parcel_id}")
        if resp.status_code != 200:
            raise RuntimeError(f"Parcel lost after restart: {resp.status_code} {resp.text}")
        print("Parcel persisted:", resp.json())

        httpx.delete(f"{BASE_URL}{API_PREFIX}/parcels/{parcel_id}")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
