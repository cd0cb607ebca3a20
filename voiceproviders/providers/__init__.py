"""Backend modules loaded on demand by voiceproviders.factory.

Each module exposes some of ``create_stt``, ``create_llm``,
``create_streaming_llm`` and ``validate_api_key``. A missing function means
the provider does not offer that capability. Nothing is imported here so
that loading one backend never pulls in the others.
"""
