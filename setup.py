from setuptools import setup

setup(
    name="nats-service",
    version="0.1.0",
    license="Apache 2 License",
    description="Resolves declarative NATS configuration and supervises the connection lifecycle",
    python_requires=">=3.8",
    install_requires=[
        "nats-py>=2.7.0",
        "nkeys",
    ],
    extras_require={
        "tests": ["pytest", "pytest-asyncio"],
    },
    packages=["nats_service"],
    zip_safe=True,
)
