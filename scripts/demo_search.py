#!/usr/bin/env python3
"""
Demo script exercising a running Dealer Search API.
Runs a filter search, a description search, the assistant and the calculator.
"""

from typing import Any, Dict, List

import requests


API_BASE_URL = "http://localhost:8000"


def print_cars(cars: List[Dict[str, Any]], total: int):
    """Pretty print a result list."""
    print(f"\n🚗 {len(cars)} shown of {total} matches")
    for i, car in enumerate(cars, 1):
        miles = f"{car['mileage']:,} mi" if car["mileage"] else "New"
        print(f"   {i:2d}. {car['name']:<40} ${car['price']:>9,.0f}  {miles:>10}  {car['mpg']} MPG")


def check_health() -> bool:
    """Check if API is running."""
    try:
        response = requests.get(f"{API_BASE_URL}/api/health", timeout=30)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def post(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST to the API and return the decoded body."""
    try:
        response = requests.post(f"{API_BASE_URL}{path}", json=payload, timeout=60)
        return response.json()
    except requests.exceptions.RequestException as e:
        return {"error": "request_failed", "message": str(e)}


def main():
    """Run the demo."""
    print("🚀 Dealer Search - Demo")
    print("=" * 80)

    print("\n🔍 Checking API status...")
    if not check_health():
        print("❌ API is not running!")
        print("\n💡 Start the API first:")
        print("   uvicorn dealer_search.app:app --host 0.0.0.0 --port 8000")
        return

    print("✅ API is running!")

    print("\n" + "=" * 80)
    print("📋 FILTER SEARCH: new hybrids between $25k and $40k")
    result = post("/api/search/cars", {
        "condition": "new",
        "fuelType": "hybrid",
        "priceRange": {"min": 25000, "max": 40000},
    })
    if result.get("success"):
        print_cars(result["cars"][:10], result["totalResults"])
    else:
        print(f"\n❌ Error: {result.get('message', 'Unknown error')}")
        return

    description = "A fuel efficient family SUV, used is fine, under $35,000"
    print("\n" + "=" * 80)
    print(f"💬 DESCRIPTION SEARCH: {description}")
    result = post("/api/search/prompt", {"description": description})
    if not result.get("success"):
        print(f"\n❌ Error: {result.get('message', 'Unknown error')}")
        return

    filters = {key: value for key, value in result["filters"].items() if value is not None}
    print(f"\n🎯 Filters: {filters}")
    print_cars(result["cars"], result["totalResults"])

    if result["cars"]:
        print("\n" + "=" * 80)
        print("🤖 ASSISTANT")
        reply = post("/api/chat", {
            "messages": [{"role": "user", "content": "Which of these is best for a long commute?"}],
            "cars": result["cars"],
            "originalQuery": description,
        })
        print(f"\n{reply.get('reply') or reply.get('message')}")

        top = result["cars"][0]
        print("\n" + "=" * 80)
        print(f"💵 AFFORDABILITY: {top['name']}")
        for loan_type in ("finance", "lease"):
            estimate = post("/api/affordability", {"price": top["price"], "loanType": loan_type})
            print(
                f"   {loan_type:<8} ${estimate['monthlyPayment']:,}/mo over {estimate['loanTerm']} months "
                f"at {estimate['interestRate']}% ({estimate['creditCategory']} credit)"
            )

    print("\n" + "=" * 80)
    print("✅ Demo complete!")


if __name__ == "__main__":
    main()
