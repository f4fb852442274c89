"""配置：运行时设置、服务分类目录、国家与地区数据"""
