from setuptools import setup, find_packages

setup(
    name="routerline",
    version="0.1.0",
    description="A streaming terminal chat client for OpenAI-compatible APIs",
    packages=find_packages(include=["routerline", "routerline.*"]),
    install_requires=[
        "httpx",
        "rich",
        "prompt-toolkit",
        "PyYAML",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "routerline=routerline.__main__:main",
        ],
    },
    python_requires=">=3.11",
)
