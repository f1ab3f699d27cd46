[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teeclient"
version = "0.1.0"
description = "Data model, binary formats and helpers for clients of a Trusted Execution Environment and its PKCS#11 trusted application"
requires-python = ">=3.10"
dependencies = []
keywords = ["tee", "trustzone", "pkcs11", "cryptoki", "trusted-application"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["teeclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
