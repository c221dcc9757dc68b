from __future__ import annotations

from zkp_channel_verifier.l2_identity.test_vectors import l2_key_vectors


def main() -> int:
    data = l2_key_vectors.load_vectors()
    errors = l2_key_vectors.validate_vectors(data)
    if errors:
        for error in errors:
            print(f"l2_key_vectors.json: {error}")
        return 1
    print("l2_key_vectors.json: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
