from setuptools import setup, find_packages

setup(
    name="storefront_qa",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"storefront_qa.executor": ["templates/*.html"]},
    scripts=["storefront-qa.py"],
    install_requires=[
        "playwright==1.52.0",
        "pydantic>=2",
        "pyyaml",
        "python-dotenv",
        "requests",
        "html2text",
        "jinja2"
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    python_requires='>=3.10',
)
