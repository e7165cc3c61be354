#!/usr/bin/env python3
"""
Validation script for URL Shortener service.
Tests the live running service to ensure all functionality works correctly.
"""

import sys
import time
import requests
from typing import Optional


class ServiceValidator:
    """Validates URL shortener service functionality."""

    def __init__(self, base_url: str = "http://localhost:5000"):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.test_results = []

    def print_header(self, text: str):
        """Print a formatted header."""
        print(f"\n{'='*60}")
        print(f"  {text}")
        print(f"{'='*60}\n")

    def print_test(self, name: str, passed: bool, details: str = ""):
        """Print test result."""
        status = "✅ PASS" if passed else "❌ FAIL"
        self.test_results.append((name, passed))
        print(f"{status} - {name}")
        if details:
            print(f"       {details}")

    def test_health_check(self) -> bool:
        """Test health check endpoint."""
        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=5)
            if response.status_code == 200:
                data = response.json()
                is_healthy = data.get("status") == "healthy"
                self.print_test("Health Check", is_healthy, f"Registry: {data.get('registry')}")
                return is_healthy
            self.print_test("Health Check", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Health Check", False, f"Error: {e}")
            return False

    def test_create_short_url(self) -> Optional[str]:
        """Test creating a short URL."""
        try:
            test_url = f"https://example.com/test/{int(time.time())}"
            response = self.session.post(
                f"{self.base_url}/shorturls",
                json={"url": test_url, "validity": 5},
                timeout=5
            )

            if response.status_code == 201:
                data = response.json()
                short_code = data.get("short_code")
                if short_code and data.get("expiry"):
                    self.print_test(
                        "Create Short URL",
                        True,
                        f"Link: {data.get('short_link')}, Expires: {data.get('expiry')}"
                    )
                    return short_code

            self.print_test("Create Short URL", False, f"Status: {response.status_code}")
            return None
        except requests.RequestException as e:
            self.print_test("Create Short URL", False, f"Error: {e}")
            return None

    def test_redirect(self, short_code: str) -> bool:
        """Test URL redirect functionality."""
        try:
            response = self.session.get(
                f"{self.base_url}/{short_code}",
                allow_redirects=False,
                timeout=5
            )

            is_redirect = response.status_code == 302
            location = response.headers.get("Location", "")
            self.print_test(
                "URL Redirect",
                is_redirect,
                f"Redirects to: {location[:50]}..." if location else "No Location header"
            )
            return is_redirect
        except requests.RequestException as e:
            self.print_test("URL Redirect", False, f"Error: {e}")
            return False

    def test_analytics(self, short_code: str) -> bool:
        """Test that the redirect was counted."""
        try:
            response = self.session.get(f"{self.base_url}/api/urls/{short_code}", timeout=5)

            if response.status_code == 200:
                data = response.json()
                counted = data.get("total_clicks", 0) >= 1
                self.print_test(
                    "Click Analytics",
                    counted,
                    f"Clicks: {data.get('total_clicks')}, Unique: {data.get('unique_clicks')}"
                )
                return counted
            self.print_test("Click Analytics", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Click Analytics", False, f"Error: {e}")
            return False

    def test_custom_code(self) -> bool:
        """Test custom short code functionality, including conflicts."""
        try:
            custom_code = f"v{int(time.time()) % 10**8}"
            payload = {
                "url": "https://github.com/example/repo",
                "validity": 5,
                "shortcode": custom_code,
            }
            first = self.session.post(f"{self.base_url}/shorturls", json=payload, timeout=5)
            second = self.session.post(f"{self.base_url}/shorturls", json=payload, timeout=5)

            passed = (
                first.status_code == 201
                and first.json().get("short_code") == custom_code
                and second.status_code == 409
            )
            self.print_test(
                "Custom Short Code",
                passed,
                f"First: {first.status_code}, Duplicate: {second.status_code}"
            )
            return passed
        except requests.RequestException as e:
            self.print_test("Custom Short Code", False, f"Error: {e}")
            return False

    def test_invalid_url(self) -> bool:
        """Test rejection of an invalid URL."""
        try:
            response = self.session.post(
                f"{self.base_url}/shorturls",
                json={"url": "not-a-url"},
                timeout=5
            )
            passed = response.status_code == 400
            self.print_test("Invalid URL Rejected", passed, f"Status: {response.status_code}")
            return passed
        except requests.RequestException as e:
            self.print_test("Invalid URL Rejected", False, f"Error: {e}")
            return False

    def test_nonexistent_code(self) -> bool:
        """Test 404 for an unknown short code."""
        try:
            response = self.session.get(
                f"{self.base_url}/zz9Qx7",
                allow_redirects=False,
                timeout=5
            )
            passed = response.status_code == 404
            self.print_test("Unknown Code Returns 404", passed, f"Status: {response.status_code}")
            return passed
        except requests.RequestException as e:
            self.print_test("Unknown Code Returns 404", False, f"Error: {e}")
            return False

    def test_stats_endpoint(self) -> bool:
        """Test statistics listing."""
        try:
            response = self.session.get(f"{self.base_url}/api/stats", timeout=5)
            passed = response.status_code == 200 and isinstance(response.json(), list)
            details = f"Entries: {len(response.json())}" if passed else f"Status: {response.status_code}"
            self.print_test("Statistics Endpoint", passed, details)
            return passed
        except requests.RequestException as e:
            self.print_test("Statistics Endpoint", False, f"Error: {e}")
            return False

    def test_web_interface(self) -> bool:
        """Test that the HTML homepage is served."""
        try:
            response = self.session.get(f"{self.base_url}/", timeout=5)
            passed = response.status_code == 200 and "<form" in response.text
            self.print_test("Web Interface", passed, f"Status: {response.status_code}")
            return passed
        except requests.RequestException as e:
            self.print_test("Web Interface", False, f"Error: {e}")
            return False

    def run_all_tests(self) -> bool:
        """Run every check and print a summary."""
        self.print_header(f"Validating URL Shortener at {self.base_url}")

        if not self.test_health_check():
            print("\n⚠️  Service is not healthy, skipping remaining checks")
            self.print_summary()
            return False

        short_code = self.test_create_short_url()
        if short_code:
            self.test_redirect(short_code)
            self.test_analytics(short_code)

        self.test_custom_code()
        self.test_invalid_url()
        self.test_nonexistent_code()

        print()

        # Additional endpoints
        self.test_stats_endpoint()
        self.test_web_interface()

        # Print summary
        self.print_summary()

        # Return overall success
        return all(passed for _, passed in self.test_results)

    def print_summary(self):
        """Print test summary."""
        total = len(self.test_results)
        passed = sum(1 for _, p in self.test_results if p)
        failed = total - passed

        self.print_header("Test Summary")
        print(f"Total Tests:  {total}")
        print(f"✅ Passed:     {passed}")
        print(f"❌ Failed:     {failed}")
        if total:
            print(f"Success Rate: {(passed/total*100):.1f}%")

        if failed > 0:
            print("\n⚠️  Failed tests:")
            for name, passed in self.test_results:
                if not passed:
                    print(f"   - {name}")

        print()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Validate URL Shortener service functionality"
    )
    parser.add_argument(
        "--url",
        default="http://localhost:5000",
        help="Base URL of the service (default: http://localhost:5000)"
    )

    args = parser.parse_args()

    validator = ServiceValidator(args.url)

    try:
        success = validator.run_all_tests()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Validation interrupted by user")
        sys.exit(2)


if __name__ == "__main__":
    main()
