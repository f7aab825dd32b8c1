import os
from glob import glob

from setuptools import find_packages, setup

package_name = 'offboard_mission'
launch_files = glob('offboard_mission/launch/**/*.py', recursive=True)
param_files = glob('offboard_mission/param/*.yaml')

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    data_files=[
        ('share/ament_index/resource_index/packages', ['resource/' + package_name]),
        (os.path.join('share', package_name), ['package.xml']),
        (os.path.join('share', package_name, 'launch'), launch_files),
        (os.path.join('share', package_name, 'param'), param_files),
    ],
    install_requires=['setuptools', 'PyYAML'],
    zip_safe=True,
    maintainer='Offboard Mission Maintainers',
    maintainer_email='maintainers@offboard-mission.dev',
    description='GPS waypoint mission controller built on top of MAVROS offboard interfaces.',
    license='Apache-2.0',
    tests_require=['pytest'],
    extras_require={'test': ['pytest']},
    entry_points={
        'console_scripts': [
            'offboard_node = offboard_mission.nodes.offboard_node:main',
        ],
    },
)
