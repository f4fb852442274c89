"""业务层：商家资料、子集合、试用期 / 套餐、搜索、向导、审计和通知"""
