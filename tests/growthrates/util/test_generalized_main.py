from growthrates.util.cli.generalized_main import generalized_main


class TestGeneralizedMain:

    def test_required_args(self):

        result = {}
        def target_func(a, b):
            result["a"] = a
            result["b"] = b

        generalized_main(target_func, argv=["1", "val_b"])
        assert result == {"a":"1", "b":"val_b"}

    def test_defaults_and_types(self):

        def target_func(x=10, y=2.5, name="abc"):
            return x, y, name

        assert generalized_main(target_func, argv=[]) == (10, 2.5, "abc")
        assert generalized_main(target_func,
                                argv=["--x", "20", "--y", "0.5"]) == (20, 0.5, "abc")

    def test_bool_flags(self):

        def target_func(flag=False, inverse=True):
            return flag, inverse

        assert generalized_main(target_func, argv=[]) == (False, True)
        assert generalized_main(target_func,
                                argv=["--flag", "--inverse"]) == (True, False)

    def test_list_and_none_defaults(self):

        def target_func(groups=["strain"], cores=None):
            return groups, cores

        assert generalized_main(target_func, argv=[]) == (["strain"], None)
        assert generalized_main(target_func,
                                argv=["--groups", "a", "b",
                                      "--cores", "4"]) == (["a", "b"], "4")

    def test_manual_overrides(self):

        def target_func(a, b=1, cores=None):
            return a, b, cores

        out = generalized_main(target_func,
                               argv=["x", "y"],
                               manual_arg_defaults={"b":2.5},
                               manual_arg_types={"cores":int},
                               manual_arg_nargs={"a":"+"})
        assert out == (["x", "y"], 2.5, None)

        out = generalized_main(target_func,
                               argv=["x", "--b", "3", "--cores", "4"],
                               manual_arg_defaults={"b":2.5},
                               manual_arg_types={"cores":int})
        assert out == ("x", 3.0, 4)

    def test_skips_var_args(self):

        def target_func(a, *args, **kwargs):
            return a, args, kwargs

        assert generalized_main(target_func, argv=["1"]) == ("1", (), {})
