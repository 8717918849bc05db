from setuptools import setup, find_packages

setup(
    name="hanasu",
    version="0.1.0",
    description="Live speech translation with streaming LLM output",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "speech": [
            "pyaudio>=0.2.11",
            "google-cloud-speech>=2.16.0",
            "google-auth>=2.10.0",
            "google-api-core>=2.10.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hanasu=hanasu.main:main",
        ],
    },
)
