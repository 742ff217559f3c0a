from setuptools import find_namespace_packages, setup

setup(
    name="tsforward",
    version="0.1.0",
    description="Scrape Prometheus text endpoints and forward them as Cloud Monitoring time series",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["tsforward*"]),
    python_requires=">=3.9",
    install_requires=[
        "google-cloud-monitoring>=2.15",
        "httpx>=0.24",
        "prometheus-client>=0.17",
        "pydantic>=2.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "tsforward=tsforward.app:main",
        ],
    },
)
