#!/usr/bin/env python3
"""
Test runner for the Starknet transaction validator
Includes both unit tests and integration tests
"""

import json
import os
import shutil
import subprocess
import sys
import tempfile
import time

HERE = os.path.dirname(os.path.abspath(__file__))
FIXTURES = os.path.join(HERE, "fixtures")


def run_unit_tests():
    """Run all unit tests"""
    print("=" * 60)
    print("RUNNING UNIT TESTS")
    print("=" * 60)

    result = subprocess.run([sys.executable, os.path.join(HERE, "test_t9n.py")],
                            capture_output=True, text=True, cwd=HERE)

    print(result.stdout)
    if result.stderr:
        print("STDERR:")
        print(result.stderr)

    return result.returncode == 0


def run_integration_tests():
    """Sign every fixture and push it through the full validation pipeline"""
    print("\n" + "=" * 60)
    print("RUNNING INTEGRATION TESTS")
    print("=" * 60)

    try:
        from t9n.config import CHAIN_ID_MAINNET, CHAIN_ID_SEPOLIA
        from t9n.transaction import parse_transaction
        from t9n.validate import validate_txn, validate_txn_json
        from t9n.wallet import KeyPair

        key_pair = KeyPair()
        print(f"\nSigner public key: {key_pair.public_key.to_hex()}")

        # Test 1: Sign and validate every fixture
        print("\n1. Testing sign -> validate for every fixture...")
        for name in sorted(os.listdir(FIXTURES)):
            with open(os.path.join(FIXTURES, name), "r") as f:
                txn, _ = parse_transaction(json.load(f))
            signed = key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA).to_dict()
            result = validate_txn(signed, "SN_SEPOLIA", key_pair.public_key)
            assert result.is_valid, f"{name} did not validate"
            print(f"   {txn.TYPE} v{txn.VERSION}: {result.message_hash.to_hex()[:18]}...")
        print("   ✓ Fixture signing test passed")

        # Test 2: Chain separation
        print("\n2. Testing chain separation...")
        with open(os.path.join(FIXTURES, "invoke_v3.json"), "r") as f:
            txn, _ = parse_transaction(json.load(f))
        signed = key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA).to_dict()
        assert not validate_txn(signed, CHAIN_ID_MAINNET, key_pair.public_key).is_valid
        print("   ✓ A Sepolia signature does not validate on mainnet")

        # Test 3: Query-only signatures
        print("\n3. Testing query-only versions...")
        signed = key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA, query_only=True).to_dict()
        assert validate_txn(signed, CHAIN_ID_SEPOLIA, key_pair.public_key, query_only=True).is_valid
        assert not validate_txn(signed, CHAIN_ID_SEPOLIA, key_pair.public_key).is_valid
        print("   ✓ Query signatures only validate as queries")

        # Test 4: File based validation and key persistence
        print("\n4. Testing file validation and key persistence...")
        temp_dir = tempfile.mkdtemp()
        try:
            key_file = key_pair.save_to_file(os.path.join(temp_dir, "key.json"))
            loaded = KeyPair.load_from_file(key_file)
            assert loaded.public_key == key_pair.public_key

            txn_file = os.path.join(temp_dir, "txn.json")
            with open(txn_file, "w") as f:
                json.dump(loaded.sign_transaction(txn, CHAIN_ID_SEPOLIA).to_dict(), f)
            result = validate_txn_json(txn_file, "SN_SEPOLIA")
            assert result.is_valid and result.recovered
            print(f"   Recovered public key: {result.public_key.to_hex()}")
            print("   ✓ File validation test passed")
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        print("\n" + "=" * 60)
        print("ALL INTEGRATION TESTS PASSED!")
        print("=" * 60)
        return True

    except Exception as e:
        print(f"\n❌ Integration test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def run_cli_demonstration():
    """Run the t9n command against a signed fixture"""
    print("\n" + "=" * 60)
    print("CLI FUNCTIONALITY DEMONSTRATION")
    print("=" * 60)

    temp_dir = tempfile.mkdtemp()
    try:
        from t9n.config import CHAIN_ID_SEPOLIA
        from t9n.transaction import parse_transaction
        from t9n.wallet import KeyPair

        key_pair = KeyPair()
        with open(os.path.join(FIXTURES, "deploy_account_v1.json"), "r") as f:
            txn, _ = parse_transaction(json.load(f))
        txn_file = os.path.join(temp_dir, "txn.json")
        with open(txn_file, "w") as f:
            json.dump(key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA).to_dict(), f)

        cases = [
            (["--public-key", key_pair.public_key.to_hex()], 0),
            (["--public-key", KeyPair().public_key.to_hex()], 1),
            (["--query"], 1),
        ]
        for extra, expected in cases:
            command = [sys.executable, "-m", "t9n", "-f", txn_file, "-c", "SN_SEPOLIA"] + extra
            result = subprocess.run(command, capture_output=True, text=True, cwd=HERE)
            print(f"   $ t9n {' '.join(extra)} -> exit {result.returncode}")
            print(f"     {result.stdout.strip()}")
            assert result.returncode == expected, result.stderr

        print("\n✓ CLI demonstration completed successfully!")
        return True

    except Exception as e:
        print(f"\n❌ CLI demonstration failed: {e}")
        import traceback
        traceback.print_exc()
        return False

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def run_performance_test():
    """Run basic performance tests"""
    print("\n" + "=" * 60)
    print("PERFORMANCE TESTS")
    print("=" * 60)

    try:
        from t9n.crypto import recover, sign, verify
        from t9n.wallet import KeyPair

        key_pair = KeyPair()
        message_hash = 0x397e76d1667c4454bfb83514e120583af836f8e32a516765497823eabe16a3f

        for name, operation in (
            ("sign", lambda: sign(key_pair.private_key, message_hash)),
            ("verify", lambda: verify(key_pair.public_key, message_hash, signature.r, signature.s)),
            ("recover", lambda: recover(message_hash, signature.r, signature.s, signature.v)),
        ):
            signature = sign(key_pair.private_key, message_hash)
            start_time = time.time()
            for _ in range(10):
                operation()
            elapsed = time.time() - start_time
            print(f"   {name}: {elapsed / 10:.4f} seconds per call")

        print("\n✓ Performance tests completed!")
        return True

    except Exception as e:
        print(f"\n❌ Performance test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def main():
    """Main test runner"""
    print("🚀 Starting Transaction Validator Test Suite\n")

    results = {}
    results['unit_tests'] = run_unit_tests()
    results['integration_tests'] = run_integration_tests()
    results['cli_demo'] = run_cli_demonstration()
    results['performance_tests'] = run_performance_test()

    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)

    for test_name, passed in results.items():
        status = "✅ PASSED" if passed else "❌ FAILED"
        print(f"{test_name.replace('_', ' ').title()}: {status}")

    total_tests = len(results)
    passed_tests = sum(results.values())

    print(f"\nOverall: {passed_tests}/{total_tests} test suites passed")

    if passed_tests == total_tests:
        print("\n🎉 ALL TESTS PASSED!")
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
