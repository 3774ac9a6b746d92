"""
Quick smoke test for a deployed WordNest API.
Walks the signup -> login -> create -> list -> forbidden update -> delete flow.

Usage: python smoke_test.py [BASE_URL]
"""
import sys
import time
import uuid

import requests

BASE_URL = "http://localhost:3000"
TIMEOUT = 30  # Generous for cold starts


def print_header(text):
    print("\n" + "=" * 60)
    print(text)
    print("=" * 60)


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


def check_health(base_url):
    print_header("Testing Health Endpoint")
    response = requests.get(f"{base_url}/health", timeout=TIMEOUT)
    if response.status_code == 200:
        print("✅ Health check passed")
        print(f"   Response: {response.json()}")
        return True
    print(f"❌ Health check failed: {response.status_code}")
    return False


def signup(base_url, username, password):
    response = requests.post(
        f"{base_url}/api/auth/signup",
        json={'username': username, 'email': f'{username}@example.com', 'password': password},
        timeout=TIMEOUT,
    )
    if response.status_code != 201:
        print(f"❌ Signup failed for {username}: {response.status_code} {response.text}")
        return None
    print(f"✅ Signed up {username}")
    return response.json()['token']


def check_post_flow(base_url):
    print_header("Testing Post Lifecycle")
    suffix = uuid.uuid4().hex[:8]
    author, intruder = f"alice_{suffix}", f"mallory_{suffix}"
    password = "secret1"

    if not signup(base_url, author, password):
        return False
    intruder_token = signup(base_url, intruder, password)
    if not intruder_token:
        return False

    response = requests.post(
        f"{base_url}/api/auth/login",
        json={'email': f'{author}@example.com', 'password': password},
        timeout=TIMEOUT,
    )
    if response.status_code != 200:
        print(f"❌ Login failed: {response.status_code}")
        return False
    token = response.json()['token']
    print("✅ Login succeeded")

    response = requests.post(
        f"{base_url}/api/posts",
        json={'title': 'Hi', 'content': 'World'},
        headers=auth_headers(token),
        timeout=TIMEOUT,
    )
    if response.status_code != 201 or response.json()['post']['author_name'] != author:
        print(f"❌ Create post failed: {response.status_code} {response.text}")
        return False
    post_id = response.json()['post']['id']
    print(f"✅ Created post {post_id}")

    response = requests.get(
        f"{base_url}/api/posts",
        params={'page': 1, 'limit': 10},
        headers=auth_headers(token),
        timeout=TIMEOUT,
    )
    if post_id not in [post['id'] for post in response.json().get('posts', [])]:
        print("❌ New post missing from first page")
        return False
    print("✅ Post listed on first page")

    response = requests.put(
        f"{base_url}/api/posts/{post_id}",
        json={'title': 'Hijacked'},
        headers=auth_headers(intruder_token),
        timeout=TIMEOUT,
    )
    if response.status_code != 403:
        print(f"❌ Expected 403 for non-author update, got {response.status_code}")
        return False
    print("✅ Non-author update rejected")

    response = requests.delete(f"{base_url}/api/posts/{post_id}", headers=auth_headers(token), timeout=TIMEOUT)
    if response.status_code != 200:
        print(f"❌ Delete failed: {response.status_code}")
        return False
    response = requests.get(f"{base_url}/api/posts/{post_id}", headers=auth_headers(token), timeout=TIMEOUT)
    if response.status_code != 404:
        print(f"❌ Deleted post still readable: {response.status_code}")
        return False
    print("✅ Post deleted")
    return True


def main(base_url):
    print_header("WORDNEST SMOKE TEST")
    print(f"Server: {base_url}")

    results = {'health': False, 'posts': False}
    try:
        results['health'] = check_health(base_url)
        if not results['health']:
            print("   Waiting 10 seconds and retrying...")
            time.sleep(10)
            results['health'] = check_health(base_url)
        if results['health']:
            results['posts'] = check_post_flow(base_url)
    except requests.exceptions.RequestException as e:
        print(f"❌ Request failed: {e}")

    print_header("TEST SUMMARY")
    for name, passed in results.items():
        print(f"{'✅ PASS' if passed else '❌ FAIL'} - {name.upper()}")
    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    url = sys.argv[1].rstrip('/') if len(sys.argv) > 1 else BASE_URL
    sys.exit(main(url))
