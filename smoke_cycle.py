"""
Full Cycle Smoke Script for the Claim Review Service

Walks a running server through the complete workflow:
1. Lecturer submits a claim with a supporting document
2. An invalid upload (.exe) is refused
3. Reviewer lists pending claims
4. One claim is approved, one rejected
5. Approving the rejected claim is refused (terminal status)
6. Claims are tracked, then one is deleted

Run with: python smoke_cycle.py [API_URL]

Prerequisites:
- Server running, e.g. uvicorn app.main:create_app --factory --port 8000
"""
import sys

import requests

# Configuration
API_URL = "http://localhost:8000"
SAMPLE_PDF = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


# Colors for terminal output
class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    BOLD = '\033[1m'
    END = '\033[0m'


def print_step(step_num: int, message: str):
    print(f"\n{Colors.BOLD}{Colors.BLUE}[Step {step_num}]{Colors.END} {message}")


def print_success(message: str):
    print(f"  {Colors.GREEN}✓ {message}{Colors.END}")


def print_warning(message: str):
    print(f"  {Colors.YELLOW}⚠ {message}{Colors.END}")


def print_error(message: str):
    print(f"  {Colors.RED}✗ {message}{Colors.END}")


def print_info(message: str):
    print(f"  → {message}")


def check_health() -> bool:
    """Check API connection."""
    print_step(0, "Checking API Connection")
    try:
        response = requests.get(f"{API_URL}/health", timeout=5)
        if response.status_code == 200:
            print_success("API is healthy and responding")
            return True
        print_error(f"API returned status {response.status_code}")
        return False
    except requests.exceptions.ConnectionError:
        print_error("Cannot connect to API. Is the server running?")
        print_info("Expected: uvicorn app.main:create_app --factory --port 8000")
        return False


def submit_claim(lecturer_name: str, notes: str, filename: str = "timesheet.pdf", content: bytes = SAMPLE_PDF):
    """Submit a claim with its supporting document."""
    files = {"supporting_document": (filename, content, "application/octet-stream")}
    data = {"lecturer_name": lecturer_name, "additional_notes": notes}
    return requests.post(f"{API_URL}/claims/", data=data, files=files, timeout=10)


def step_submit_claims():
    """Step 1: Submit two valid claims."""
    print_step(1, "Submitting Claims")

    claim_ids = []
    for name, notes in [("Jane Smith", "Marking for module CS101"), ("John Doe", "Extra tutorial hours")]:
        response = submit_claim(name, notes)
        if response.status_code == 201:
            claim = response.json()["claim"]
            print_success(f"Claim {claim['id']} submitted for {name}")
            print_info(f"Status: {claim['status']}")
            claim_ids.append(claim["id"])
        else:
            print_error(f"Failed to submit claim: {response.text}")
    return claim_ids


def step_invalid_upload():
    """Step 2: An executable is refused."""
    print_step(2, "Submitting Invalid Document")

    response = submit_claim("Mallory", "Should be refused", filename="payload.exe", content=b"MZ")
    if response.status_code == 400:
        print_success(f"Refused as expected: {response.json()['detail']}")
        return True
    print_error(f"Unexpected response {response.status_code}: {response.text}")
    return False


def step_list_pending():
    """Step 3: Reviewer view of pending claims."""
    print_step(3, "Listing Pending Claims")

    response = requests.get(f"{API_URL}/claims/pending", timeout=10)
    if response.status_code == 200:
        claims = response.json()
        print_success(f"{len(claims)} claim(s) pending")
        for claim in claims:
            print_info(f"#{claim['id']} {claim['lecturer_name']} - {claim['original_filename']}")
        return claims
    print_error(f"Failed to list pending claims: {response.text}")
    return None


def step_review(claim_id: int, action: str):
    """Step 4: Approve or reject a claim."""
    print_step(4, f"{action.capitalize()} Claim {claim_id}")

    response = requests.post(
        f"{API_URL}/claims/{claim_id}/{action}",
        json={"reviewer_name": "Smoke Reviewer", "reason": f"{action} - automated smoke run"},
        timeout=10
    )
    if response.status_code == 200:
        result = response.json()
        print_success(result["message"])
        print_info(f"{result['previous_status']} -> {result['new_status']}")
        return result
    print_error(f"Failed to {action}: {response.text}")
    return None


def step_invalid_transition(claim_id: int):
    """Step 5: A rejected claim cannot be approved."""
    print_step(5, f"Approving Already Rejected Claim {claim_id}")

    response = requests.post(f"{API_URL}/claims/{claim_id}/approve", timeout=10)
    if response.status_code == 409:
        detail = response.json()["detail"]
        print_success("Refused as expected")
        print_info(f"Current: {detail['current_status']}, requested: {detail['requested_status']}")
        return True
    print_error(f"Unexpected response {response.status_code}: {response.text}")
    return False


def step_track_and_delete(claim_id: int):
    """Step 6: Track all claims, then delete one."""
    print_step(6, "Tracking and Deleting")

    summary = requests.get(f"{API_URL}/claims/dashboard/summary", timeout=10).json()
    print_info(f"Total Claims: {summary['total_claims']}")
    print_info(f"Status Counts: {summary['status_counts']}")

    response = requests.delete(f"{API_URL}/claims/{claim_id}", timeout=10)
    if response.status_code != 200:
        print_error(f"Failed to delete: {response.text}")
        return False
    print_success(response.json()["message"])

    again = requests.delete(f"{API_URL}/claims/{claim_id}", timeout=10)
    if again.status_code == 404:
        print_success("Second delete reports not found")
        return True
    print_warning(f"Second delete returned {again.status_code}")
    return False


def run_full_cycle():
    """Run the complete smoke cycle."""
    print(f"\n{'='*60}")
    print(f"{Colors.BOLD}  FULL CYCLE SMOKE RUN - Claim Review Service{Colors.END}")
    print(f"{'='*60}")
    print(f"\nAPI URL: {API_URL}")

    if not check_health():
        return False

    claim_ids = step_submit_claims()
    if len(claim_ids) != 2:
        return False

    ok = step_invalid_upload()
    step_list_pending()

    approved_id, rejected_id = claim_ids
    ok = step_review(approved_id, "approve") is not None and ok
    ok = step_review(rejected_id, "reject") is not None and ok
    ok = step_invalid_transition(rejected_id) and ok
    ok = step_track_and_delete(approved_id) and ok

    print(f"\n{'='*60}")
    if ok:
        print(f"{Colors.BOLD}{Colors.GREEN}  ✓ FULL CYCLE COMPLETE{Colors.END}")
    else:
        print(f"{Colors.BOLD}{Colors.RED}  ✗ FULL CYCLE FINISHED WITH FAILURES{Colors.END}")
    print(f"{'='*60}")
    print(f"\nCheck API docs: {API_URL}/docs")
    return ok


if __name__ == "__main__":
    if len(sys.argv) > 1:
        API_URL = sys.argv[1].rstrip("/")
    sys.exit(0 if run_full_cycle() else 1)
