import pytest

from lstdocker import load_default


@pytest.fixture
def full_env():
    """Every variable the packaged document references, network left unset."""
    env = {
        "OSNAME": "ubuntu",
        "DOCKER_UID": "1000",
        "INDY_SDK_VERSION": "1.16",
        "PYTHON3_VERSION": "3.6",
        "ANDROID_NDK_VERSION": "r20",
        "ANDROID_NDK_DIR": "/home/android/ndk",
        "ANDROID_ARCHS": "arm arm64 x86",
        "ANDROID_PREBUILT_DIR": "/home/android/prebuilt",
        "RUST_TARGETS": "aarch64-linux-android armv7-linux-androideabi",
    }
    for service in ("BASE", "CI", "ANDROID_NDK", "ANDROID_BUILD"):
        env[f"LST_{service}_DOCKER_NAME"] = f"sovrin/libsovtoken-{service.lower()}"
        env[f"LST_{service}_DOCKER_TAG"] = "0.1.0"
    return env


@pytest.fixture
def document():
    return load_default()
