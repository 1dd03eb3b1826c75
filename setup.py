from setuptools import setup

setup(
    name="straightskel",
    version="0.1.0",
    description="Straight skeletons and offset polygons of simple polygons",
    packages=["straightskel"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
)
