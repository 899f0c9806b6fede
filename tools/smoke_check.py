"""Hit a running server with a few requests and print what came back.

Usage: python tools/smoke_check.py [BASE_URL] [IMAGE_PATH]
"""
import base64
import requests
import json
import sys

BASE = "http://127.0.0.1:3000"

def get_json(path):
    r = requests.get(BASE + path, timeout=10)
    try:
        return r.status_code, r.json()
    except ValueError:
        return r.status_code, {"text": r.text}

def post_json(path, data, timeout=20):
    r = requests.post(BASE + path, headers={"Content-Type": "application/json"}, data=json.dumps(data), timeout=timeout)
    try:
        return r.status_code, r.json()
    except ValueError:
        return r.status_code, {"text": r.text}

def main(image_path=None):
    code, health = get_json("/")
    print("health", code, health.get("status"))
    code, err = post_json("/api/scan", {"userId": "smoke"})
    print("scan without image", code, err.get("error"))
    if image_path:
        with open(image_path, "rb") as f:
            image = base64.b64encode(f.read()).decode("ascii")
        code, scan = post_json("/api/scan", {"image": image, "userId": "smoke"}, timeout=90)
        print("scan", code, scan.get("english"), scan.get("timesSeen"), scan.get("isReview"))
    code, words = get_json("/api/vocabulary/smoke")
    print("vocabulary", code, len(words) if isinstance(words, list) else words)
    code, due = get_json("/api/review/smoke")
    print("review", code, len(due) if isinstance(due, list) else due)

if __name__ == "__main__":
    if len(sys.argv) > 1:
        BASE = sys.argv[1].rstrip("/")
    try:
        main(sys.argv[2] if len(sys.argv) > 2 else None)
        sys.exit(0)
    except requests.RequestException as e:
        print("error", str(e))
        sys.exit(1)
