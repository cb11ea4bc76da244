from setuptools import setup, find_packages

setup(
    name="tabletest-format",
    version="0.1.0",
    description="Column alignment for @TableTest tables in Java, Kotlin and .table files",
    author="tabletest-format contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "rich",
        "tabulate",
        "EditorConfig",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires='>=3.8',
    entry_points={
        "console_scripts": [
            "tabletest-format=main:main",
        ]
    },
    include_package_data=True,
)
