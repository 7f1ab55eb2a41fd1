from setuptools import setup, find_packages

setup(
    name="timeFit",
    version="0.1.0",
    author="Gilbert Han",
    author_email="GilbertHan1011@gmail.com",
    description="Continuous representations of time-series gene expression data with a mixture of B-splines",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
        "scipy",
        "tqdm",
        "joblib",
        "scikit-learn",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
