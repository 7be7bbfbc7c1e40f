"""
配置包。
按运行环境拆分的Django配置，由shopilent.settings根据DJANGO_ENV选择。
"""
