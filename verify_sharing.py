import requests
import json

BASE_URL = "http://localhost:8000/api"

def run_test():
    owner = {"X-User-Id": "owner-1"}
    resp = requests.post(f"{BASE_URL}/trips", json={
        "title": "Porto weekend", "start_date": "2026-06-01", "end_date": "2026-06-03",
        "total_budget": 600
    }, headers=owner)
    trip = resp.json()
    trip_id = trip["id"]

    location = requests.post(f"{BASE_URL}/trips/{trip_id}/locations", json={
        "name": "Livraria Lello", "latitude": 41.1469, "longitude": -8.6148, "address": "Porto"
    }, headers=owner).json()
    requests.post(f"{BASE_URL}/trips/{trip_id}/itineraries", json={
        "location_id": location["id"], "start_time": "2026-06-02T10:00:00",
        "end_time": "2026-06-02T11:30:00", "budget": 8
    }, headers=owner)

    invite = requests.post(f"{BASE_URL}/trips/{trip_id}/invitations", json={
        "email": "friend@example.com", "permission": "edit"
    }, headers=owner).json()
    token = invite["invitation"]["token"]
    resp = requests.post(f"{BASE_URL}/invitations/{token}/accept", headers={"X-User-Id": "friend-1"})

    if resp.status_code == 200:
        print("Share:", json.dumps(resp.json(), indent=2))
        budget = requests.get(f"{BASE_URL}/trips/{trip_id}/budget", headers={"X-User-Id": "friend-1"})
        print("Budget:", json.dumps(budget.json(), indent=2))
    else:
        print("Error:", resp.text)

if __name__ == "__main__":
    run_test()
