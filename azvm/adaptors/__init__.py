"""Adaptors for third-party SDKs that are imported lazily."""
