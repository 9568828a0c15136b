from setuptools import setup, find_packages
import sys

if sys.version_info < (3, 9):
    print("Please use python 3.9 or newer.")
    sys.exit(1)


requires = [
    "requests",
    "webob",
    "zope.interface",
]

pyramid_deps = ["pyramid"]

test_deps = ["pytest"] + pyramid_deps


setup(
    name="shopgrant",
    version="0.1a",
    description="Shopify oauth authorization code handshake for python web apps.",
    install_requires=requires,
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
    extras_require={
        "pyramid": pyramid_deps,
        "test": test_deps,
        "dev": ["flake8", "black"],
    },
)
