from setuptools import setup, find_packages

setup(
    name='azmp',
    version='0.1.0',
    description='Azure Marketplace VM offer template generators and tooling',
    license='Apache 2.0',
    packages=find_packages(include=['azmp', 'azmp.*']),
    package_data={
        'azmp.data': ['best_practices/*.md',
                      'scripts/*.j2',
                      'workbooks/*.kql'],
    },
    python_requires='>=3.9',
    entry_points={
        'console_scripts': ['azmp = azmp.cli:Run'],
    },
    install_requires=['absl-py>=1.0',
                      'jinja2>=2.7',
                      'PyYAML>=5.1'],
    extras_require={
        'test': ['mock>=1.0'],
    })
